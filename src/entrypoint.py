"""CLIエントリーポイント"""
import argparse
import json
import sys
from typing import Optional

from pydantic import ValidationError

from .features.pipeline.domain.models import PipelineStatus
from .features.pipeline.orchestrator import PipelineOrchestrator
from .infrastructure.config.settings import Settings
from .shared.exceptions.errors import ConfigurationError
from .shared.http.client import HTTPClient
from .shared.logging.config import get_logger, setup_logging

logger = get_logger(__name__)


def load_settings(env_file: str) -> Settings:
    """
    設定を読み込む

    Raises:
        ConfigurationError: 設定値が不正な場合
    """
    try:
        return Settings(_env_file=env_file)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def main(argv: Optional[list[str]] = None) -> int:
    """
    メインエントリーポイント

    Returns:
        int: 終了コード（0: 成功, 1: 失敗）
    """
    parser = argparse.ArgumentParser(
        description="輸送オーダーを取得し、出発地・目的地の住所をジオコーディングするツール"
    )

    parser.add_argument(
        "--env-file",
        type=str,
        default=".env",
        help="環境変数ファイルのパス（デフォルト: .env）",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="ログレベル",
    )

    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="結果JSONの出力先ファイル（省略時は標準出力）",
    )

    parser.add_argument(
        "--concurrency",
        type=int,
        help="同時に実行するジオコーディングの最大数",
    )

    parser.add_argument(
        "--progress",
        action="store_true",
        help="ジオコーディングの進捗バーを表示",
    )

    args = parser.parse_args(argv)

    try:
        # 設定を読み込み
        settings = load_settings(args.env_file)

        # コマンドライン引数で上書き
        if args.log_level:
            settings.log_level = args.log_level
        if args.concurrency is not None:
            if args.concurrency < 1:
                raise ConfigurationError("--concurrency must be >= 1")
            settings.geocoding_concurrency = args.concurrency
        if args.progress:
            settings.show_progress = True

        # ロガーを設定
        setup_logging(level=settings.log_level)

        logger.info("Starting transport order geocoding")
        logger.info(f"Environment: {settings.environment}")
        logger.info(f"Order feed: {settings.order_feed_url}")

        with HTTPClient(
            timeout=settings.http_timeout,
            max_retries=settings.http_retry,
            user_agent=settings.http_user_agent,
        ) as http_client:
            orchestrator = PipelineOrchestrator.from_settings(settings, http_client=http_client)
            result = orchestrator.execute()

        output = {
            "summary": result.to_summary_dict(),
            "orders": [order.to_dict() for order in result.orders],
        }
        text = json.dumps(output, ensure_ascii=False, indent=2)

        if args.output:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(text + "\n")
            logger.info(f"Result written to {args.output}")
        else:
            print(text)

        logger.info(f"Pipeline finished: {result.status.value}")
        return 1 if result.status == PipelineStatus.FAILED else 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130  # SIGINT
    except Exception as e:
        logger.error(f"Application failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
