"""Tests for license OCR parsing and the scanner wrapper."""

import pytest

from cardealpro.llm import UpstreamServiceError
from cardealpro.scanning import LicenseScanner, UnsupportedImageError, parse_ohio_license
from tests.conftest import FakeOcrEngine

LICENSE_TEXT = """OHIO
DRIVER LICENSE
DOE JANE DL 12345678
533 BELLEVIEW AVE
CHILLICOTHE OH 45601
DOB 01/02/1985
"""


class TestParseOhioLicense:
    def test_full_license(self):
        assert parse_ohio_license(LICENSE_TEXT) == {
            "firstName": "JANE",
            "lastName": "DOE",
            "address": "533 BELLEVIEW AVE",
            "city": "CHILLICOTHE",
            "state": "OH",
            "zipCode": "45601",
        }

    def test_city_without_state_defaults_to_home_state(self):
        result = parse_ohio_license("COLUMBUS 43004")
        assert result == {"city": "COLUMBUS", "state": "OH", "zipCode": "43004"}

    def test_out_of_state_code_kept(self):
        result = parse_ohio_license("HUNTINGTON, WV 25701")
        assert result["city"] == "HUNTINGTON"
        assert result["state"] == "WV"

    def test_zip_plus_four(self):
        assert parse_ohio_license("CHILLICOTHE OH 45601-1234")["zipCode"] == "45601"

    def test_multi_word_city(self):
        assert parse_ohio_license("NEW ALBANY OH 43054")["city"] == "NEW ALBANY"

    def test_garbage_yields_only_state(self):
        assert parse_ohio_license("@@@ ### !!!") == {"state": "OH"}

    def test_empty_text(self):
        assert parse_ohio_license("") == {"state": "OH"}

    def test_dl_line_with_one_word_ignored(self):
        assert "firstName" not in parse_ohio_license("DL")

    def test_number_only_line_is_not_address(self):
        assert "address" not in parse_ohio_license("12345678")


class TestLicenseScanner:
    @pytest.mark.asyncio
    async def test_scan_parses_recognized_text(self):
        engine = FakeOcrEngine(text=LICENSE_TEXT)
        result = await LicenseScanner(engine).scan(b"\xff\xd8image", "image/png")
        assert result.raw_text == LICENSE_TEXT
        assert result.fields["lastName"] == "DOE"
        assert engine.calls == [(b"\xff\xd8image", "image/png")]

    @pytest.mark.asyncio
    async def test_rejects_non_image(self):
        engine = FakeOcrEngine(text=LICENSE_TEXT)
        with pytest.raises(UnsupportedImageError):
            await LicenseScanner(engine).scan(b"%PDF", "application/pdf")
        assert engine.calls == []

    @pytest.mark.asyncio
    async def test_engine_failure_propagates(self):
        with pytest.raises(UpstreamServiceError):
            await LicenseScanner(FakeOcrEngine(fail=True)).scan(b"img")
