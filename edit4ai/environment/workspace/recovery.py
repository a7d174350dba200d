# filename: recovery.py
# @Time    : 2025/11/10 15:20
# @Author  : JQQ
# @Email   : jqq1716@gmail.com
# @Software: PyCharm
"""
回滚动作 | Recovery actions

每个已生效的原子操作都会产生一个 RecoverFunc，执行它即可撤销该操作。RecoverFunc 自身不会抛出异常，失败时记录日志并返回 False。

Every applied primitive effect produces a RecoverFunc that undoes it. Calling a RecoverFunc never raises: failures
are logged and reported as False.
"""

from collections.abc import Callable, Sequence

from loguru import logger


class RecoverFunc:
    """
    可调用的回滚动作 | A callable recovery action

    Attributes:
        description (str): 动作描述，用于日志 | Description used in logs
    """

    __slots__ = ("_func", "description")

    def __init__(self, func: Callable[[], None], description: str) -> None:
        self._func = func
        self.description = description

    def __call__(self) -> bool:
        try:
            self._func()
        except Exception as e:
            logger.exception(f"回滚动作执行失败 | Recovery action failed: {self.description}: {e}")
            return False
        logger.debug(f"回滚动作已执行 | Recovery action done: {self.description}")
        return True

    def __repr__(self) -> str:
        return f"RecoverFunc({self.description!r})"


def run_recover_funcs(recover_funcs: Sequence[RecoverFunc]) -> bool:
    """
    按严格逆序执行回滚动作 | Run recovery actions in strict reverse order

    Args:
        recover_funcs (Sequence[RecoverFunc]): 按生效顺序记录的回滚动作 | Actions in the order they were recorded

    Returns:
        bool: 是否全部成功 | Whether every action succeeded
    """
    ok = True
    for func in reversed(recover_funcs):
        ok = func() and ok
    return ok
