import logging
import os

import numpy as np
import pytest
from PIL import Image

from mandelsnap import pipeline
from mandelsnap.color import SchemeKind
from mandelsnap.config import normalise_config
from mandelsnap.errors import ImageWriteError, OutputDirectoryError
from mandelsnap.image.png_writer import format_coordinate
from mandelsnap.pipeline import run, select_region


@pytest.fixture
def small_cfg(tmp_path):
    return normalise_config({
        "width": 24,
        "height": 24,
        "max_iterations": 200,
        "max_attempts": 5,
        "workers": 1,
        "output_dir": str(tmp_path / "output"),
    })


def _count_samples(monkeypatch):
    calls = []
    real_sample = pipeline.sample_region

    def counting_sample(rng):
        calls.append(1)
        return real_sample(rng)

    monkeypatch.setattr(pipeline, "sample_region", counting_sample)
    return calls


def test_select_region_gives_up_after_the_attempt_cap(monkeypatch, rng):
    calls = _count_samples(monkeypatch)
    monkeypatch.setattr(pipeline, "is_interesting_region", lambda *a, **k: False)

    viewport, attempts = select_region(rng, max_attempts=7, max_iterations=50)

    assert attempts == 7
    assert len(calls) == 8
    assert viewport.zoom > 0


def test_select_region_stops_at_first_accepted(monkeypatch, rng):
    calls = _count_samples(monkeypatch)
    verdicts = iter([False, False, True])
    monkeypatch.setattr(pipeline, "is_interesting_region", lambda *a, **k: next(verdicts))

    _, attempts = select_region(rng, max_attempts=400)

    assert attempts == 2
    assert len(calls) == 3


def test_select_region_with_zero_attempts_takes_first_sample(monkeypatch, rng):
    calls = _count_samples(monkeypatch)
    monkeypatch.setattr(pipeline, "is_interesting_region", lambda *a, **k: pytest.fail("should not validate"))

    _, attempts = select_region(rng, max_attempts=0)

    assert attempts == 0
    assert len(calls) == 1


def test_select_region_returns_a_validated_region():
    rng = np.random.default_rng(99)
    viewport, attempts = select_region(rng, max_attempts=400, max_iterations=300)
    if attempts < 400:
        assert pipeline.is_interesting_region(
            viewport.center_re, viewport.center_im, viewport.zoom, max_iterations=300
        )


def test_run_writes_one_png(small_cfg, caplog):
    caplog.set_level(logging.INFO, logger="mandelsnap")
    result = run(cfg=small_cfg, rng=np.random.default_rng(3), clock=lambda: 1_700_000_000.9)

    assert result.timestamp == 1_700_000_000
    assert os.listdir(small_cfg["output_dir"]) == [os.path.basename(result.path)]
    name = os.path.basename(result.path)
    assert name.startswith("mandelbrot_")
    assert name.endswith(f"_{result.scheme.name}_1700000000.png")
    assert format_coordinate(result.viewport.center_re) in name
    assert format_coordinate(result.viewport.zoom) in name

    with Image.open(result.path) as img:
        assert img.size == (24, 24)
        assert img.text["scheme"] == result.scheme.name
        assert img.text["attempts"] == str(result.attempts)
        if result.scheme.kind is SchemeKind.MONOCHROME:
            assert "hue" in img.text

    messages = [r.getMessage() for r in caplog.records]
    assert any(f"attempt #{result.attempts}" in m and repr(result.viewport.zoom) in m for m in messages)
    assert any(result.scheme.name in m and "at zoom" in m for m in messages)
    assert any(result.path in m for m in messages)


def test_run_is_reproducible_with_a_seed(small_cfg):
    first = run(cfg=small_cfg, rng=np.random.default_rng(11), clock=lambda: 1.0)
    with open(first.path, "rb") as f:
        first_bytes = f.read()
    os.remove(first.path)

    second = run(cfg=small_cfg, rng=np.random.default_rng(11), clock=lambda: 1.0)
    assert (second.viewport, second.scheme, second.attempts) == (first.viewport, first.scheme, first.attempts)
    with open(second.path, "rb") as f:
        assert f.read() == first_bytes


def test_run_fails_when_output_dir_cannot_be_created(small_cfg, tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    cfg = dict(small_cfg, output_dir=str(blocker / "output"))
    with pytest.raises(OutputDirectoryError):
        run(cfg=cfg, rng=np.random.default_rng(0))


def test_run_fails_when_image_cannot_be_written(small_cfg, monkeypatch):
    def broken_save(buf, path, metadata=None):
        raise ImageWriteError("disk full")

    monkeypatch.setattr(pipeline, "save_png", broken_save)
    with pytest.raises(ImageWriteError):
        run(cfg=small_cfg, rng=np.random.default_rng(0))
