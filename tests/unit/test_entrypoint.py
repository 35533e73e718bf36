"""CLIエントリーポイントのテスト"""

import json
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from src import entrypoint
from src.features.orders.domain.models import Address, Coordinates, Order
from src.features.pipeline.domain.models import PipelineResult, PipelineStatus


def _result(status: PipelineStatus) -> PipelineResult:
    departure = Address(
        country="Germany",
        zip_code="10117",
        city="Berlin",
        country_code="DEU",
        street="Unter den Linden",
        house_number="77",
        two_letter_country_code="DE",
        coordinates=Coordinates(52.5163, 13.3777),
    )
    destination = Address(
        country="Austria",
        zip_code="1010",
        city="Wien",
        country_code="AUT",
        street="Stephansplatz",
        house_number="3",
        two_letter_country_code="AT",
        coordinates=Coordinates(48.2085, 16.3731),
    )
    orders = [] if status == PipelineStatus.FAILED else [Order(departure, destination)]
    return PipelineResult(
        run_id="abc12345",
        started_at=datetime(2024, 1, 1, 12, 0, 0),
        completed_at=datetime(2024, 1, 1, 12, 0, 1),
        status=status,
        orders=orders,
        duration_seconds=1.0,
    )


@pytest.fixture
def orchestrator() -> MagicMock:
    with patch.object(entrypoint.PipelineOrchestrator, "from_settings") as from_settings:
        instance = MagicMock()
        from_settings.return_value = instance
        yield instance


def test_main_writes_output_file(orchestrator: MagicMock, tmp_path: Path) -> None:
    orchestrator.execute.return_value = _result(PipelineStatus.SUCCESS)
    output = tmp_path / "orders.json"

    exit_code = entrypoint.main(["--env-file", str(tmp_path / "missing.env"), "--output", str(output)])

    assert exit_code == 0
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["summary"]["status"] == "success"
    assert data["orders"][0]["hasCoordinates"] is True
    assert data["orders"][0]["destinationAddress"]["latitude"] == 48.2085


def test_main_prints_to_stdout(orchestrator: MagicMock, tmp_path: Path, capsys) -> None:
    orchestrator.execute.return_value = _result(PipelineStatus.SUCCESS)

    exit_code = entrypoint.main(["--env-file", str(tmp_path / "missing.env")])

    assert exit_code == 0
    data = json.loads(capsys.readouterr().out)
    assert len(data["orders"]) == 1


def test_main_failed_pipeline_returns_error(orchestrator: MagicMock, tmp_path: Path) -> None:
    orchestrator.execute.return_value = _result(PipelineStatus.FAILED)

    exit_code = entrypoint.main(
        ["--env-file", str(tmp_path / "missing.env"), "--output", str(tmp_path / "out.json")]
    )

    assert exit_code == 1


def test_main_rejects_invalid_concurrency(orchestrator: MagicMock, tmp_path: Path) -> None:
    exit_code = entrypoint.main(["--env-file", str(tmp_path / "missing.env"), "--concurrency", "0"])

    assert exit_code == 1
    orchestrator.execute.assert_not_called()
