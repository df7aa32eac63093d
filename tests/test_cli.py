from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from conftest import make_appointment
from psicoapp import cli
from psicoapp.storage.appointments import AppointmentRepository
from psicoapp.storage.store import JsonCollectionStore


def test_report_command_prints_text_and_writes_artifacts(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    data_dir = tmp_path / "data"
    assert (
        cli.main(
            [
                "--data-dir",
                str(data_dir),
                "patients",
                "add",
                "--name",
                "Ana",
                "--last-name",
                "Souza",
                "--phone",
                "(11) 91234-5678",
                "--session-value",
                "150,00",
            ]
        )
        == 0
    )
    patient_id = json.loads((data_dir / "patients.json").read_text())[0]["patient_id"]
    AppointmentRepository(JsonCollectionStore(data_dir / "appointments.json")).create(
        make_appointment("a1", patient_id=patient_id, day=date(2024, 5, 2))
    )

    out_dir = tmp_path / "out"
    code = cli.main(
        [
            "--data-dir",
            str(data_dir),
            "report",
            "--start",
            "2024-05-01",
            "--end",
            "2024-05-31",
            "--no-price-types",
            "--out",
            str(out_dir),
        ]
    )

    assert code == 0
    output = capsys.readouterr().out
    assert "Faturamento total: R$ 150,00" in output
    assert "SOCIAL vs INTEGRAL" not in output
    assert (out_dir / "relatorio_2024-05-01_2024-05-31.txt").exists()


def test_report_command_rejects_inverted_period(tmp_path: Path) -> None:
    with pytest.raises(SystemExit, match="Invalid period"):
        cli.main(
            [
                "--data-dir",
                str(tmp_path),
                "report",
                "--start",
                "2024-05-31",
                "--end",
                "2024-05-01",
            ]
        )


def test_patients_add_reports_validation_issues(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = cli.main(
        [
            "--data-dir",
            str(tmp_path),
            "patients",
            "add",
            "--name",
            "Ana",
            "--last-name",
            "Souza",
            "--phone",
            "123",
            "--session-value",
            "150",
        ]
    )

    assert code == 1
    assert "invalid_phone" in capsys.readouterr().out
    assert not (tmp_path / "patients.json").exists()


def test_patients_list_formats_entries(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cli.main(
        [
            "--data-dir",
            str(tmp_path),
            "patients",
            "add",
            "--name",
            "bruno",
            "--last-name",
            "LIMA",
            "--phone",
            "1134567890",
            "--session-value",
            "80",
            "--social",
        ]
    )
    capsys.readouterr()

    assert cli.main(["--data-dir", str(tmp_path), "patients", "list"]) == 0
    assert capsys.readouterr().out.strip() == "Bruno Lima | (11) 3456-7890 | Social"


def test_settings_init_then_login(tmp_path: Path) -> None:
    base = ["--data-dir", str(tmp_path)]
    assert (
        cli.main(
            base
            + [
                "settings",
                "init",
                "--name",
                "Ana",
                "--last-name",
                "Souza",
                "--email",
                "ana@example.com",
                "--password",
                "secret",
            ]
        )
        == 0
    )

    assert cli.main(base + ["auth", "login", "--email", "ana@example.com", "--password", "secret"]) == 0
    with pytest.raises(SystemExit):
        cli.main(base + ["auth", "login", "--email", "ana@example.com", "--password", "nope"])


def test_data_dir_defaults_to_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PSICOAPP_DATA_DIR", str(tmp_path))

    cli.main(
        [
            "settings",
            "init",
            "--name",
            "Ana",
            "--last-name",
            "Souza",
            "--email",
            "ana@example.com",
            "--password",
            "secret",
        ]
    )

    assert (tmp_path / "settings.json").exists()


def _register_patient(data_dir: Path) -> str:
    cli.main(
        [
            "--data-dir",
            str(data_dir),
            "patients",
            "add",
            "--name",
            "Ana",
            "--last-name",
            "Souza",
            "--phone",
            "(11) 91234-5678",
            "--session-value",
            "150",
        ]
    )
    return json.loads((data_dir / "patients.json").read_text())[0]["patient_id"]


def _schedule(data_dir: Path, patient_id: str, day: str, start: str, *extra: str) -> int:
    return cli.main(
        [
            "--data-dir",
            str(data_dir),
            "appointments",
            "add",
            "--patient-id",
            patient_id,
            "--date",
            day,
            "--start",
            start,
            "--end",
            "23:00",
            *extra,
        ]
    )


def test_appointments_add_stores_storage_date_and_patient_snapshot(tmp_path: Path) -> None:
    patient_id = _register_patient(tmp_path)

    assert _schedule(tmp_path, patient_id, "2024-05-02", "09:00", "--notes", "primeira") == 0

    [record] = json.loads((tmp_path / "appointments.json").read_text())
    assert record["date"] == "02-05-2024"
    assert record["appointment_id"].startswith("apt_")
    assert record["patient_name"] == "Ana Souza"
    assert record["status"] == "confirmado"
    assert record["price"] == 150.0
    assert record["is_social"] is False
    assert record["notes"] == "primeira"


def test_appointments_add_rejects_unknown_patient_and_bad_input(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert _schedule(tmp_path, "missing", "2024-05-02", "09:00") == 1
    assert "Unknown patient" in capsys.readouterr().out

    patient_id = _register_patient(tmp_path)
    with pytest.raises(SystemExit):
        _schedule(tmp_path, patient_id, "02-05-2024", "09:00")
    with pytest.raises(SystemExit):
        _schedule(tmp_path, patient_id, "2024-05-02", "9h")
    assert _schedule(tmp_path, patient_id, "2024-05-02", "23:30") == 1
    assert not (tmp_path / "appointments.json").exists()


def test_appointments_list_orders_and_filters_by_range(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    patient_id = _register_patient(tmp_path)
    _schedule(tmp_path, patient_id, "2024-06-10", "10:00")
    _schedule(tmp_path, patient_id, "2024-05-02", "14:00")
    _schedule(tmp_path, patient_id, "2024-05-02", "09:00", "--price", "90")
    capsys.readouterr()

    assert cli.main(["--data-dir", str(tmp_path), "appointments", "list"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert [line.split(" | ")[0] for line in lines] == [
        "02-05-2024 09:00-23:00",
        "02-05-2024 14:00-23:00",
        "10-06-2024 10:00-23:00",
    ]

    assert (
        cli.main(["--data-dir", str(tmp_path), "appointments", "list", "--start", "2024-06-01"])
        == 0
    )
    [line] = capsys.readouterr().out.splitlines()
    assert line.startswith("10-06-2024 10:00-23:00 | Ana Souza | confirmado | apt_")


def test_appointments_status_and_delete(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    patient_id = _register_patient(tmp_path)
    _schedule(tmp_path, patient_id, "2024-05-02", "09:00")
    repository = AppointmentRepository(JsonCollectionStore(tmp_path / "appointments.json"))
    [appointment] = repository.list_all()
    base = ["--data-dir", str(tmp_path), "appointments"]

    assert cli.main(base + ["status", appointment.appointment_id, "faltou"]) == 0
    assert repository.get(appointment.appointment_id).status == "faltou"
    with pytest.raises(SystemExit):
        cli.main(base + ["status", appointment.appointment_id, "done"])
    assert cli.main(base + ["status", "apt_missing", "cancelado"]) == 1

    assert cli.main(base + ["delete", appointment.appointment_id]) == 0
    assert repository.list_all() == []
    assert cli.main(base + ["delete", appointment.appointment_id]) == 1
    assert "Unknown appointment" in capsys.readouterr().out
