# utils/background.py
# 응답 이후 실행되는 분리된(detached) 백그라운드 작업을 관리합니다.

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Optional, Set

from config import AppConfig
from .logger import LoggerMixin


class BackgroundTaskRunner(LoggerMixin):
    """
    요청/응답 흐름과 분리된 작업을 실행합니다.

    - 작업은 최대 한 번 시도되며 재시도하지 않습니다.
    - 호출자에게 결과를 돌려주지 않습니다. spawn()은 항상 None을 반환합니다.
    - 작업 안에서 발생한 예외는 로그로 남기고 흡수합니다.
    - 프로세스가 종료되면 진행 중인 작업은 버려집니다. shutdown() 이후의 spawn()은 로그만 남깁니다.
    """

    def __init__(self, max_workers: Optional[int] = None, thread_name_prefix: str = "notify"):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or AppConfig.BACKGROUND_WORKERS,
            thread_name_prefix=thread_name_prefix,
        )
        self._lock = threading.Lock()
        self._pending: Set[Future] = set()

    def spawn(self, func: Callable[..., Any], *args, task_name: Optional[str] = None, **kwargs) -> None:
        """작업을 백그라운드에서 실행하도록 예약합니다."""
        name = task_name or getattr(func, "__name__", "task")
        try:
            future = self._executor.submit(self._run, name, func, *args, **kwargs)
        except RuntimeError as e:
            # 종료된 실행기는 새 작업을 받지 않습니다.
            self.log_error(f"백그라운드 작업 예약 실패, 버림: {name}: {e}", task=name)
            return
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)

    def join(self, timeout: Optional[float] = None) -> bool:
        """진행 중인 작업이 끝날 때까지 기다립니다. 모두 끝났으면 True."""
        with self._lock:
            pending = set(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait_for_tasks: bool = True) -> None:
        self._executor.shutdown(wait=wait_for_tasks)

    def _run(self, name: str, func: Callable[..., Any], *args, **kwargs) -> None:
        try:
            func(*args, **kwargs)
        except Exception as e:
            self.log_error(f"백그라운드 작업 실패: {name}: {e}", task=name)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
