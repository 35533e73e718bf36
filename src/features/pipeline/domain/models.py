"""パイプライン実行結果のドメインモデル"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ...orders.domain.models import Order


class PipelineStatus(str, Enum):
    """パイプラインのステータス"""

    PENDING = "pending"  # 実行待ち
    RUNNING = "running"  # 実行中
    SUCCESS = "success"  # 成功
    FAILED = "failed"  # 失敗（オーダーを取得できなかった）
    PARTIAL = "partial"  # 部分的成功（スキップ・座標なしあり）


@dataclass
class PipelineResult:
    """パイプライン実行結果"""

    run_id: str  # 実行ID（ユニーク）
    started_at: datetime
    completed_at: Optional[datetime] = None
    status: PipelineStatus = PipelineStatus.PENDING
    orders: list[Order] = field(default_factory=list)
    skipped_records: int = 0  # 解析できずスキップしたレコード数
    geocoded_addresses: int = 0
    failed_addresses: int = 0
    errors: list[str] = field(default_factory=list)
    duration_seconds: Optional[float] = None

    @property
    def total_orders(self) -> int:
        return len(self.orders)

    @property
    def complete_orders(self) -> int:
        """出発地・目的地の両方に座標があるオーダー数"""
        return sum(1 for order in self.orders if order.has_coordinates())

    def to_summary_dict(self) -> dict[str, Any]:
        """ログ・CLI出力用のサマリー"""
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "status": self.status.value,
            "total_orders": self.total_orders,
            "complete_orders": self.complete_orders,
            "skipped_records": self.skipped_records,
            "geocoded_addresses": self.geocoded_addresses,
            "failed_addresses": self.failed_addresses,
            "errors": self.errors,
            "duration_seconds": self.duration_seconds,
        }
