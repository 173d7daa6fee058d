"""Tests for the page comparator."""

from unittest.mock import Mock

from PIL import Image, ImageDraw

from visual_compare.imaging.comparator import PageComparator
from visual_compare.imaging.normalizer import ImageNormalizer
from visual_compare.imaging.pixel_diff import PixelDiffEngine
from visual_compare.models.comparison import CaptureError, CapturedImage, Scored, SizeMismatch


def _comparator() -> PageComparator:
    return PageComparator(ImageNormalizer(), PixelDiffEngine())


class TestCompare:
    def test_identical_pages(self, tmp_path, write_image):
        reference = write_image(tmp_path / "prod" / "_.png", size=(1280, 2400))
        candidate = write_image(tmp_path / "staging" / "_.png", size=(1280, 2400))
        diff = tmp_path / "diff" / "_.png"

        result = _comparator().compare(reference, candidate, diff)

        assert isinstance(result.outcome, Scored)
        assert result.outcome.score == 100.0
        assert result.outcome.mismatched_pixels == 0
        assert result.diff_path == diff
        assert diff.exists()

    def test_changed_region_scores_below_100(self, tmp_path, noisy_image):
        image = noisy_image()
        reference = tmp_path / "ref.png"
        image.save(reference)
        changed = image.copy()
        ImageDraw.Draw(changed).rectangle((0, 0, 639, 799), fill=(0, 0, 0, 255))
        candidate = tmp_path / "cand.png"
        changed.save(candidate)

        result = _comparator().compare(reference, candidate, tmp_path / "diff.png")

        assert isinstance(result.outcome, Scored)
        assert 0.0 <= result.outcome.score < 95.0

    def test_different_source_sizes_are_normalized(self, tmp_path, write_image):
        reference = write_image(tmp_path / "ref.png", size=(1280, 800), color=(50, 50, 50, 255))
        candidate = write_image(tmp_path / "cand.png", size=(2560, 1600), color=(50, 50, 50, 255))

        result = _comparator().compare(reference, candidate, tmp_path / "diff.png")

        assert isinstance(result.outcome, Scored)
        assert result.outcome.total_pixels == 1280 * 800
        with Image.open(candidate) as img:
            assert img.size == (1280, 800)

    def test_missing_reference(self, tmp_path, write_image):
        candidate = write_image(tmp_path / "cand.png")
        diff = tmp_path / "diff.png"

        result = _comparator().compare(tmp_path / "ref.png", candidate, diff)

        assert isinstance(result.outcome, CaptureError)
        assert "Missing image" in result.outcome.reason
        assert result.diff_path is None
        assert not diff.exists()

    def test_corrupt_candidate(self, tmp_path, write_image):
        reference = write_image(tmp_path / "ref.png")
        candidate = tmp_path / "cand.png"
        candidate.write_bytes(b"\x89PNG\r\n\x1a\n garbage")

        result = _comparator().compare(reference, candidate, tmp_path / "diff.png")

        assert isinstance(result.outcome, CaptureError)
        assert "decode" in result.outcome.reason

    def test_size_mismatch_skips_diff(self, tmp_path):
        normalizer = Mock(spec=ImageNormalizer)
        normalizer.normalize.side_effect = [
            CapturedImage(image=Image.new("RGBA", (1280, 800)), source_path=tmp_path / "ref.png"),
            CapturedImage(image=Image.new("RGBA", (1280, 720)), source_path=tmp_path / "cand.png"),
        ]
        diff = tmp_path / "diff.png"

        result = PageComparator(normalizer, PixelDiffEngine()).compare(
            tmp_path / "ref.png", tmp_path / "cand.png", diff
        )

        assert isinstance(result.outcome, SizeMismatch)
        assert result.diff_path is None
        assert not diff.exists()
