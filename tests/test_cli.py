"""Tests for the command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from exam_schedule_parser.cli import app

runner = CliRunner()


@pytest.fixture
def files(tmp_path, block_xlsx, table_xlsx, exam_xlsx, lecturer_xlsx):
    paths = {}
    for name, data in [
        ("block", block_xlsx),
        ("table", table_xlsx),
        ("exam", exam_xlsx),
        ("lecturer", lecturer_xlsx),
    ]:
        path = tmp_path / f"{name}.xlsx"
        path.write_bytes(data)
        paths[name] = path
    return paths


class TestDetect:
    """Tests for the detect command."""

    def test_block_file(self, files):
        """Test the layout of a block file is printed."""
        result = runner.invoke(app, ["detect", str(files["block"])])
        assert result.exit_code == 0
        assert "block_structure" in result.output
        assert "blockCount: 2" in result.output

    def test_malformed_file(self, tmp_path):
        """Test a file that is not a spreadsheet exits with an error."""
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"not a spreadsheet")
        result = runner.invoke(app, ["detect", str(path)])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_missing_file(self, tmp_path):
        """Test a missing file is rejected."""
        result = runner.invoke(app, ["detect", str(tmp_path / "missing.xlsx")])
        assert result.exit_code != 0


class TestParse:
    """Tests for the parse command."""

    def test_json_output(self, files, tmp_path):
        """Test parsing an enrollment file to JSON."""
        output = tmp_path / "out.json"
        result = runner.invoke(
            app, ["parse", str(files["block"]), "--type", "enroll", "-o", str(output)]
        )

        assert result.exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["total_records"] == 4
        assert data["layout"] == "block_structure"

    def test_csv_output(self, files, tmp_path):
        """Test parsing an exam file to CSV."""
        output = tmp_path / "csv_out"
        output.mkdir()
        result = runner.invoke(
            app, ["parse", str(files["exam"]), "-t", "exam", "-f", "csv", "-o", str(output)]
        )

        assert result.exit_code == 0
        assert (output / "records.csv").exists()
        assert (output / "errors.csv").exists()

    def test_table_needs_mapping(self, files):
        """Test a table enrollment file without a mapping fails."""
        result = runner.invoke(app, ["parse", str(files["table"]), "--type", "enroll"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_table_with_mapping(self, files, tmp_path):
        """Test --map options for a table enrollment file."""
        output = tmp_path / "table.json"
        result = runner.invoke(
            app,
            [
                "parse",
                str(files["table"]),
                "--type",
                "enroll",
                "--map",
                "student_id=Student ID",
                "--map",
                "course_code=Course Code",
                "-o",
                str(output),
            ],
        )

        assert result.exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["total_records"] == 2
        assert data["records"][0]["class_no"] == "N/A"

    def test_invalid_mapping(self, files):
        """Test a malformed --map value."""
        result = runner.invoke(
            app, ["parse", str(files["table"]), "--type", "enroll", "--map", "student_id"]
        )
        assert result.exit_code == 1

    def test_config_file(self, files, tmp_path):
        """Test settings loaded from a JSON config file."""
        config = tmp_path / "settings.json"
        config.write_text(json.dumps({"class_placeholder": "TBA"}), encoding="utf-8")
        output = tmp_path / "out.json"

        result = runner.invoke(
            app,
            [
                "parse",
                str(files["table"]),
                "--auto-map",
                "--config",
                str(config),
                "-o",
                str(output),
            ],
        )

        assert result.exit_code == 0
        assert json.loads(output.read_text(encoding="utf-8"))["total_records"] == 2

    def test_bad_config_file(self, files, tmp_path):
        """Test unknown settings in a config file."""
        config = tmp_path / "settings.json"
        config.write_text(json.dumps({"unknown": 1}), encoding="utf-8")
        result = runner.invoke(app, ["parse", str(files["block"]), "--config", str(config)])
        assert result.exit_code == 1


class TestSchedule:
    """Tests for the schedule command."""

    def test_student_schedule(self, files, tmp_path):
        """Test one student's schedule is printed and exported."""
        output = tmp_path / "schedule.json"
        result = runner.invoke(
            app,
            [
                "schedule",
                str(files["block"]),
                str(files["exam"]),
                "--student",
                "441000002",
                "-o",
                str(output),
            ],
        )

        assert result.exit_code == 0
        assert "Matched: 0" in result.output
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["gap_count"] == 2

    def test_unknown_student(self, files):
        """Test a student without enrollments."""
        result = runner.invoke(
            app, ["schedule", str(files["block"]), str(files["exam"]), "-s", "999999999"]
        )
        assert result.exit_code == 1


class TestLecturer:
    """Tests for the lecturer command."""

    def test_found(self, files):
        """Test a lecturer's duties are listed."""
        result = runner.invoke(app, ["lecturer", str(files["lecturer"]), "--name", "khalid"])
        assert result.exit_code == 0

    def test_not_found(self, files):
        """Test an unknown lecturer."""
        result = runner.invoke(app, ["lecturer", str(files["lecturer"]), "--name", "nobody"])
        assert result.exit_code == 1


class TestHijri:
    """Tests for the hijri command."""

    def test_convert(self):
        """Test converting a Hijri date."""
        result = runner.invoke(app, ["hijri", "1447-07-01"])
        assert result.exit_code == 0
        assert "2025-12-17" in result.output

    def test_reverse(self):
        """Test converting a Gregorian date to Hijri."""
        result = runner.invoke(app, ["hijri", "2025-12-17", "--to-hijri"])
        assert result.exit_code == 0
        assert "1447-07-01" in result.output

    def test_out_of_range(self):
        """Test a year outside the supported band."""
        result = runner.invoke(app, ["hijri", "2025-12-17"])
        assert result.exit_code == 1

    def test_bad_format(self):
        """Test an unreadable date."""
        result = runner.invoke(app, ["hijri", "tomorrow"])
        assert result.exit_code == 1
