# filename: __init__.py
# @Time    : 2025/11/10 10:22
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
