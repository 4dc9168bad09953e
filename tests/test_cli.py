import json
import os

from PIL import Image

from mandelsnap.cli import build_arg_parser, main


def _write_config(tmp_path, **overrides):
    cfg = {"width": 20, "height": 20, "max_iterations": 150, "max_attempts": 3, "workers": 1}
    cfg.update(overrides)
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps(cfg))
    return str(path)


def test_parser_defaults():
    args = build_arg_parser().parse_args([])
    assert args.config is None
    assert args.seed is None
    assert args.log_level == "INFO"
    assert args.log_file is None
    assert not args.progress


def test_main_renders_and_logs_to_stdout(tmp_path, capsys):
    out_dir = tmp_path / "out"
    code = main(["--config", _write_config(tmp_path), "--output-dir", str(out_dir), "--seed", "42"])

    assert code == 0
    files = os.listdir(out_dir)
    assert len(files) == 1
    with Image.open(out_dir / files[0]) as img:
        assert img.size == (20, 20)

    stdout = capsys.readouterr().out
    assert "I am generating a mandelbrot image" in stdout
    assert f"I saved the image as: {out_dir / files[0]}" in stdout


def test_main_writes_log_file(tmp_path):
    log_file = tmp_path / "render.log"
    code = main([
        "--config", _write_config(tmp_path, output_dir=str(tmp_path / "out")),
        "--seed", "1", "--log-file", str(log_file),
    ])
    assert code == 0
    assert "I saved the image as" in log_file.read_text(encoding="utf-8")


def test_main_reports_output_dir_failure(tmp_path, capsys):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    code = main(["--config", _write_config(tmp_path), "--output-dir", str(blocker / "out")])

    assert code == 1
    assert "Failed to create output directory" in capsys.readouterr().out


def test_main_rejects_bad_config(tmp_path, capsys):
    code = main(["--config", _write_config(tmp_path, width=-5)])
    assert code == 2
    assert "Invalid configuration" in capsys.readouterr().out


def test_main_rejects_missing_config_file(tmp_path):
    assert main(["--config", str(tmp_path / "nope.json")]) == 2


def test_main_rejects_negative_seed(tmp_path, capsys):
    code = main(["--config", _write_config(tmp_path), "--seed", "-1"])
    assert code == 2
    assert "seed must not be negative" in capsys.readouterr().out


def test_main_rejects_null_field_in_config(tmp_path, capsys):
    code = main(["--config", _write_config(tmp_path, width=None)])
    assert code == 2
    assert "width must be an integer" in capsys.readouterr().out
