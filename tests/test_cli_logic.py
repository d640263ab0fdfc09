import json
import logging

import numpy as np
import pytest

from autocontrast import PixelBuffer, read_pnm, transform, write_pnm
from autocontrast.cli import build_parser, main, sweep_counts


class TestCLIArguments:
    def setup_method(self):
        self.parser = build_parser()

    def test_positional_arguments(self):
        args = self.parser.parse_args(["4", "in.pnm", "out.pnm", "0.01"])

        assert args.threads == 4
        assert args.input == "in.pnm"
        assert args.output == "out.pnm"
        assert args.coeff == pytest.approx(0.01)
        assert args.on_degenerate is None
        assert args.sweep is None

    def test_scientific_coefficient(self):
        args = self.parser.parse_args(["1", "a", "b", "5e-3"])

        assert args.coeff == pytest.approx(0.005)

    @pytest.mark.parametrize(
        "argv, message",
        [
            (["abc", "a", "b", "0"], "Invalid number: abc"),
            (["4x", "a", "b", "0"], "Trailing characters after number: 4x"),
            (["4 ", "a", "b", "0"], "Trailing characters after number: 4 "),
            (["4", "a", "b", "0.5\t"], "Trailing characters after number: 0.5"),
            (["4", "a", "b", "0.1.2"], "Trailing characters after number: 0.1.2"),
            (["4", "a", "b", "x0.1"], "Invalid number: x0.1"),
            (["0", "a", "b", "0"], "Thread count must be at least 1"),
            (["2", "a", "b", "-0.1"], "Coefficient must not be negative"),
        ],
    )
    def test_invalid_numbers(self, argv, message, capsys):
        with pytest.raises(SystemExit) as excinfo:
            self.parser.parse_args(argv)

        assert excinfo.value.code == 2
        assert message in capsys.readouterr().err

    def test_too_few_arguments(self):
        with pytest.raises(SystemExit):
            self.parser.parse_args(["4", "in.pnm"])

    def test_sweep_counts(self):
        assert sweep_counts(1) == [1]
        assert sweep_counts(8) == [1, 2, 4, 8]
        assert sweep_counts(6) == [1, 2, 4, 6]


class TestCLIMain:
    def setup_method(self):
        rng = np.random.default_rng(11)
        self.image = rng.integers(60, 180, (20, 30, 3), dtype=np.uint8)

    def _write_input(self, tmp_path, image=None):
        path = tmp_path / "input.pnm"
        write_pnm(path, PixelBuffer.from_image(self.image if image is None else image))
        return path

    def test_processes_file(self, tmp_path, capsys):
        input_path = self._write_input(tmp_path)
        output_path = tmp_path / "result" / "output.pnm"

        code = main(["2", str(input_path), str(output_path), "0.01"])

        assert code == 0
        assert "Time (2 thread(s)):" in capsys.readouterr().out

        expected = transform(self.image.copy(), clip_fraction=0.01, workers=1)
        np.testing.assert_array_equal(read_pnm(output_path).data, expected)

    def test_sweep(self, tmp_path, capsys):
        input_path = self._write_input(tmp_path)
        output_path = tmp_path / "output.pnm"

        code = main(["1", str(input_path), str(output_path), "0", "--sweep", "4"])

        lines = capsys.readouterr().out.splitlines()
        assert code == 0
        assert [line.split(")")[0] for line in lines] == [
            "Time (1 thread(s",
            "Time (2 thread(s",
            "Time (4 thread(s",
        ]
        assert output_path.exists()

    def test_degenerate_image_fails(self, tmp_path, capsys):
        input_path = self._write_input(tmp_path, np.full((4, 4), 9, dtype=np.uint8))
        output_path = tmp_path / "output.pnm"

        code = main(["1", str(input_path), str(output_path), "0"])

        assert code == 1
        assert "Error processing image" in capsys.readouterr().err
        assert not output_path.exists()

    def test_degenerate_image_identity(self, tmp_path):
        flat = np.full((4, 4), 9, dtype=np.uint8)
        input_path = self._write_input(tmp_path, flat)
        output_path = tmp_path / "output.pnm"

        code = main(["1", str(input_path), str(output_path), "0", "--on-degenerate", "identity"])

        assert code == 0
        np.testing.assert_array_equal(read_pnm(output_path).as_image(), flat)

    def test_config_file(self, tmp_path):
        flat = np.full((4, 4), 9, dtype=np.uint8)
        input_path = self._write_input(tmp_path, flat)
        config_path = tmp_path / "settings.json"
        config_path.write_text(json.dumps({"on_degenerate": "identity"}))

        code = main(["1", str(input_path), str(tmp_path / "o.pnm"), "0", "--config", str(config_path)])

        assert code == 0

    def test_missing_input(self, tmp_path, capsys):
        code = main(["1", str(tmp_path / "nope.pnm"), str(tmp_path / "o.pnm"), "0"])

        assert code == 1
        assert "Image not found" in capsys.readouterr().err

    def test_not_a_pnm(self, tmp_path, capsys):
        input_path = tmp_path / "input.pnm"
        input_path.write_bytes(b"GIF89a")

        code = main(["1", str(input_path), str(tmp_path / "o.pnm"), "0"])

        assert code == 1
        assert "PNM file not recognized" in capsys.readouterr().err

    def test_debug_logs_stage_timings(self, tmp_path, caplog):
        caplog.set_level(logging.DEBUG, logger="autocontrast")
        input_path = self._write_input(tmp_path)

        code = main(["2", str(input_path), str(tmp_path / "o.pnm"), "0", "--debug"])

        messages = [record.getMessage() for record in caplog.records]
        assert code == 0
        for stage in ("Histogram", "Borders", "Mapping", "Remap"):
            assert any(message.startswith(f"{stage} in ") for message in messages)
