import threading
import time

import pytest
from PIL import Image

from png2ico.models.errors import BatchConversionFailed, ConversionCancelled, DecodeFailed, EncodeFailed
from png2ico.models.icon_model import BatchIntent, ConversionMode, SizePolicy, SizeSpec, Tier
from png2ico.models.image_model import SourceFile
from png2ico.services.batch_service import IconConverter, build_converter, convert_one, output_name_for
from png2ico.services.pixel_encoder import PixelEncoder, png_compress
from png2ico.services.image_service import looks_like_png
from png2ico.config import ConverterConfig

from conftest import make_source


def test_optimized_end_to_end(source_factory, directory_reader):
    data = IconConverter().convert_one(source_factory("logo.png", 512, 512), ConversionMode.OPTIMIZED)

    assert data[:6] == bytes.fromhex("000001000600")
    _, entries = directory_reader(data)
    assert [e[0] for e in entries] == [16, 32, 48, 64, 128, 0]
    assert [e[1] for e in entries] == [16, 32, 48, 64, 128, 0]

    for entry, size in zip(entries[:4], [16, 32, 48, 64]):
        assert entry[6] == 40 + size * size * 4
    for entry in entries[4:]:
        assert looks_like_png(data[entry[7]:entry[7] + entry[6]])

    last_four = sorted((e[7], e[7] + e[6]) for e in entries[2:])
    for (_, end), (start, _) in zip(last_four, last_four[1:]):
        assert end == start
    assert last_four[-1][1] == len(data)
    assert sum(e[6] for e in entries) == len(data) - 6 - 16 * 6


def test_output_is_stable_for_identical_input(source_factory):
    source = source_factory("logo.png", 300, 120, color=(0, 128, 255, 200))
    converter = IconConverter()
    first = converter.convert_one(source, ConversionMode.OPTIMIZED)
    assert converter.convert_one(source, ConversionMode.OPTIMIZED) == first


@pytest.mark.parametrize(
    "name,expected",
    [("logo.png", "logo.ico"), ("my.app.icon.PNG", "my.app.icon.ico"), ("plain", "plain.ico")],
)
def test_output_name(name, expected):
    assert output_name_for(name) == expected


def _slow_first_decoder(data, name):
    # the first source finishes last
    if name == "a.png":
        time.sleep(0.3)
    return make_source(name, 64, 32)


def test_batch_keeps_input_order(directory_reader):
    sources = [SourceFile(name=n, data=b"") for n in ("a.png", "b.png", "c.png")]
    converter = IconConverter(decoder=_slow_first_decoder, max_workers=3)

    report = converter.convert_batch(sources, ConversionMode.SINGLE_LARGE)

    assert report.ok
    assert [r.output_name for r in report.results] == ["a.ico", "b.ico", "c.ico"]
    for result in report.results:
        header, entries = directory_reader(result.data)
        assert header == (0, 1, 1)
        width, height, _, _, planes, bpp, size, offset = entries[0]
        assert (width, height, planes, bpp) == (0, 0, 1, 32)
        assert offset == 22
        assert offset + size == len(result.data)
        assert looks_like_png(result.data[offset:])


def _failing_second_decoder(data, name):
    if name == "b.png":
        raise DecodeFailed(f"Cannot decode image: {name}", source_name=name)
    return make_source(name, 40, 40)


SOURCES = [SourceFile(name=n, data=b"") for n in ("a.png", "b.png", "c.png")]


def test_single_file_intent_reports_only_failed_source():
    converter = IconConverter(decoder=_failing_second_decoder)
    report = converter.convert_batch(SOURCES, ConversionMode.SINGLE_LARGE, BatchIntent.SINGLE_FILE)

    assert [r.output_name for r in report.results] == ["a.ico", "c.ico"]
    assert [(f.index, f.name) for f in report.failures] == [(1, "b.png")]
    assert isinstance(report.error_for("b.png"), DecodeFailed)
    assert report.error_for("a.png") is None
    assert report.aggregate_error is None


def test_archive_intent_reports_aggregate_failure():
    converter = IconConverter(decoder=_failing_second_decoder)
    report = converter.convert_batch(SOURCES, ConversionMode.OPTIMIZED, BatchIntent.COMBINED_ARCHIVE)

    error = report.aggregate_error
    assert isinstance(error, BatchConversionFailed)
    assert error.failed_names == ["b.png"]
    assert "b.png" in str(error)
    assert [r.output_name for r in report.results] == ["a.ico", "c.ico"]
    assert all(r.data[:6] == bytes.fromhex("000001000600") for r in report.results)


def test_real_decoder_failure_is_isolated(png_factory):
    sources = [
        SourceFile("good.png", png_factory(20, 20)),
        SourceFile("broken.png", b"definitely not a png"),
    ]
    report = IconConverter().convert_batch(sources, ConversionMode.SINGLE_LARGE)

    assert [r.output_name for r in report.results] == ["good.ico"]
    assert [f.name for f in report.failures] == ["broken.png"]


def test_convert_one_raises_for_its_source():
    with pytest.raises(DecodeFailed) as info:
        IconConverter().convert_one(SourceFile("broken.png", b"\x00\x01"), ConversionMode.OPTIMIZED)
    assert info.value.source_name == "broken.png"


def test_reduced_policy(source_factory, directory_reader):
    policy = SizePolicy(optimized=(SizeSpec(16, 16, Tier.BITMAP),), single=(SizeSpec(32, 32, Tier.COMPRESSED),))
    converter = IconConverter(policy=policy)

    header, entries = directory_reader(converter.convert_one(source_factory("x.png", 64, 64), ConversionMode.OPTIMIZED))
    assert header[2] == 1
    assert entries[0][:2] == (16, 16)


def test_cancel_discards_batch():
    converter = IconConverter(max_workers=1)

    def cancelling_decoder(data, name):
        converter.cancel()
        return make_source(name, 16, 16)

    converter.decoder = cancelling_decoder
    with pytest.raises(ConversionCancelled):
        converter.convert_batch(SOURCES, ConversionMode.OPTIMIZED)


def test_converter_from_config(source_factory):
    converter = build_converter(ConverterConfig(resample="bicubic", compress_level=9, max_workers=2))
    assert converter.max_workers == 2

    data = convert_one(source_factory("logo.png", 64, 64), ConversionMode.SINGLE_LARGE, converter=converter)
    assert data[:6] == bytes.fromhex("000001000100")


def test_oversized_source_is_isolated(monkeypatch, png_factory):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    sources = [SourceFile("good.png", png_factory(8, 8)), SourceFile("huge.png", png_factory(64, 64))]

    report = IconConverter().convert_batch(sources, ConversionMode.SINGLE_LARGE)

    assert [r.output_name for r in report.results] == ["good.ico"]
    assert [f.name for f in report.failures] == ["huge.png"]
    assert isinstance(report.failures[0].error, DecodeFailed)


def test_codec_crash_is_isolated():
    calls = []

    def crash_first(pixels):
        calls.append(pixels)
        if len(calls) == 1:
            raise RuntimeError("codec crashed")
        return png_compress(pixels)

    sources = [make_source("a.png", 16, 16), make_source("b.png", 16, 16)]
    converter = IconConverter(encoder=PixelEncoder(crash_first), max_workers=1)

    report = converter.convert_batch(sources, ConversionMode.SINGLE_LARGE, BatchIntent.SINGLE_FILE)

    assert [f.name for f in report.failures] == ["a.png"]
    assert isinstance(report.failures[0].error, EncodeFailed)
    assert report.failures[0].error.source_name == "a.png"
    assert [r.output_name for r in report.results] == ["b.ico"]


def test_single_download_does_not_undo_batch_cancel():
    started = threading.Event()
    release = threading.Event()

    def blocking_decoder(data, name):
        started.set()
        release.wait(5)
        return make_source(name, 16, 16)

    converter = IconConverter(decoder=blocking_decoder, max_workers=1)
    outcome = {}

    def run():
        try:
            outcome["report"] = converter.convert_batch(SOURCES, ConversionMode.SINGLE_LARGE)
        except ConversionCancelled as exc:
            outcome["error"] = exc

    worker = threading.Thread(target=run)
    worker.start()
    assert started.wait(5)

    converter.cancel()
    data = converter.convert_one(make_source("solo.png", 16, 16), ConversionMode.SINGLE_LARGE)
    release.set()
    worker.join(10)

    assert data[:6] == bytes.fromhex("000001000100")
    assert "report" not in outcome
    assert isinstance(outcome["error"], ConversionCancelled)


def test_cancel_without_batch_is_harmless(source_factory):
    converter = IconConverter()
    converter.cancel()
    data = converter.convert_one(source_factory("logo.png", 16, 16), ConversionMode.SINGLE_LARGE)
    assert data[:6] == bytes.fromhex("000001000100")
