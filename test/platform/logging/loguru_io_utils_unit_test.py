from src.platform.logging.loguru_io import Logger, LoguruIO
from src.platform.logging.loguru_io_config import _parse_http_status_level
from src.platform.logging.loguru_io_utils import (
    mask_sensitive,
    should_mask_keyword,
    truncate_content,
)
from test.shared.utils import make_passengers


class TestMaskSensitive:
    def test_passenger_repr_hides_contact_fields(self) -> None:
        passenger = make_passengers(['1'])[0]

        masked = mask_sensitive(passenger)

        assert isinstance(masked, str)
        assert '0912345678' not in masked
        assert 'rider@example.com' not in masked
        assert "phone='********'" in masked
        assert "full_name='Rider 1'" in masked

    def test_plain_values_pass_through_untouched(self) -> None:
        assert mask_sensitive(42) == 42
        assert mask_sensitive('seat 3') == 'seat 3'

    def test_keyword_masking(self) -> None:
        assert should_mask_keyword('card_number', '4111111111111111') == '********'
        assert should_mask_keyword('seat_ids', ['1']) == ['1']


class TestLoguruIOMasking:
    def test_nested_kwargs_are_masked(self) -> None:
        io_logger = LoguruIO(Logger.base, truncate_content=False)

        masked = io_logger.mask_sensitive(
            {'booking_id': 'b-1', 'card_number': '4111111111111111', 'seat_ids': ['1', '2']}
        )

        assert masked == {'booking_id': 'b-1', 'card_number': '********', 'seat_ids': ['1', '2']}


class TestTruncateContent:
    def test_long_strings_are_cut(self) -> None:
        truncated = truncate_content('x' * 1500)

        assert truncated.startswith('x' * 1000)
        assert truncated.endswith('(+500 chars)')

    def test_short_strings_stay(self) -> None:
        assert truncate_content('short') == 'short'


class TestAccessLogLevel:
    def test_granian_line(self) -> None:
        line = '127.0.0.1 - "GET /api/trip HTTP/1.1" - 200 - 8ms'
        assert _parse_http_status_level(line) == 'SUCCESS'

    def test_uvicorn_line(self) -> None:
        line = '127.0.0.1:52344 - "POST /api/booking HTTP/1.1" 409'
        assert _parse_http_status_level(line) == 'ERROR'

    def test_other_messages_are_ignored(self) -> None:
        assert _parse_http_status_level('Application startup complete.') is None
