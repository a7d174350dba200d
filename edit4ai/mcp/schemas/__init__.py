# filename: __init__.py
# @Time    : 2025/11/12 14:02
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
