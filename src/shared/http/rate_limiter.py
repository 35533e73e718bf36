"""レート制限・バックオフユーティリティ"""

import random
import threading
import time
from typing import Optional

from ..logging.config import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    レート制限を実装するクラス

    外部APIのクォータを守るため、リクエスト間に最小間隔を設ける。
    複数スレッドから呼ばれても間隔が保たれるようにロックで直列化する。
    """

    def __init__(
        self,
        min_wait: float = 0.0,
        max_wait: float = 0.0,
        requests_per_second: Optional[float] = None,
    ):
        """
        Args:
            min_wait: 最小待機時間（秒）
            max_wait: 最大待機時間（秒）
            requests_per_second: 秒あたりの最大リクエスト数（設定時はmin/max_waitを上書き）
        """
        if requests_per_second:
            # リクエスト/秒から待機時間を計算
            wait_time = 1.0 / requests_per_second
            self.min_wait = wait_time
            self.max_wait = wait_time * 1.2
        else:
            self.min_wait = min_wait
            self.max_wait = max(min_wait, max_wait)

        self.last_request_time: Optional[float] = None
        self._lock = threading.Lock()

        logger.debug(
            f"RateLimiter initialized: min_wait={self.min_wait:.2f}s, "
            f"max_wait={self.max_wait:.2f}s"
        )

    def wait(self) -> None:
        """
        適切な待機時間をスリープ

        前回のリクエストからの経過時間を考慮し、
        必要に応じて追加の待機を行う
        """
        with self._lock:
            current_time = time.monotonic()

            if self.last_request_time is not None:
                elapsed = current_time - self.last_request_time
                wait_time = random.uniform(self.min_wait, self.max_wait)

                if elapsed < wait_time:
                    sleep_duration = wait_time - elapsed
                    logger.debug(f"Rate limiting: sleeping for {sleep_duration:.2f}s")
                    time.sleep(sleep_duration)

            self.last_request_time = time.monotonic()


def backoff_delay(
    attempt: int,
    base_delay: float = 0.2,
    max_delay: float = 5.0,
    jitter: float = 0.5,
) -> float:
    """
    指数バックオフ（ジッター付き）の待機時間を計算

    Args:
        attempt: 0始まりのリトライ回数
        base_delay: 初回の待機時間（秒）
        max_delay: 待機時間の上限（秒）
        jitter: ジッター幅（0.5なら待機時間の50%〜100%の範囲でランダム化）

    Returns:
        float: 待機時間（秒）
    """
    delay = min(max_delay, base_delay * (2 ** attempt))

    if jitter <= 0:
        return delay

    jitter = min(jitter, 1.0)
    return random.uniform(delay * (1.0 - jitter), delay)
