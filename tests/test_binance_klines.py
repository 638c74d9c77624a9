import unittest
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp

from builders import FOUR_HOURS_MS, START_MS, kline_page, kline_row
from crypto_forecast.exceptions import DecodeError, EmptyResultError, TransportError
from crypto_forecast.logger.logger import Logger
from crypto_forecast.platforms.binance import BinanceKlinesAPI, parse_float, parse_kline

PRIMARY = "https://primary.example"
FALLBACK = "https://fallback.example"


def _mock_response(status=200, payload=None, text=""):
    resp = AsyncMock()
    resp.status = status
    resp.json.return_value = payload
    resp.text.return_value = text
    ctx = AsyncMock()
    ctx.__aenter__.return_value = resp
    ctx.__aexit__.return_value = False
    return ctx


class TestParsing(unittest.TestCase):

    def test_parse_float_accepts_numbers_and_numeric_strings(self):
        self.assertEqual(parse_float("42.5"), 42.5)
        self.assertEqual(parse_float(7), 7.0)
        self.assertEqual(parse_float(" 1e3 "), 1000.0)

    def test_parse_float_falls_back_to_zero(self):
        for value in ("abc", None, "", [], {}, True, "nan", "inf"):
            self.assertEqual(parse_float(value), 0.0, value)

    def test_parse_kline_skips_short_rows(self):
        self.assertIsNone(parse_kline([1, "1", "2", "0.5", "1.5"]))

    def test_parse_kline_maps_fields(self):
        candle = parse_kline([START_MS, "1.0", "2.0", "0.5", "1.5", "10", START_MS + 1])
        self.assertEqual(candle.open_time, START_MS)
        self.assertEqual((candle.open, candle.high, candle.low, candle.close, candle.volume),
                         (1.0, 2.0, 0.5, 1.5, 10.0))

    def test_parse_kline_bad_field_becomes_zero(self):
        candle = parse_kline([START_MS, "x", "2.0", "0.5", "1.5", "10"])
        self.assertEqual(candle.open, 0.0)
        self.assertEqual(candle.close, 1.5)


class TestBinancePagination(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.logger = MagicMock(spec=Logger)
        self.api = BinanceKlinesAPI(
            logger=self.logger,
            symbol="BTCUSDT",
            interval="4h",
            base_url=PRIMARY,
            fallback_base_url=FALLBACK,
        )
        self.end = START_MS + 20 * FOUR_HOURS_MS

    async def test_single_short_page(self):
        page = kline_page(START_MS, 5)
        with patch.object(self.api, "_request_page", AsyncMock(return_value=page)) as request:
            result = await self.api.fetch(START_MS, self.end, page_limit=10)

        request.assert_awaited_once_with(PRIMARY, START_MS, self.end, 10)
        self.assertEqual(len(result.series), 5)
        self.assertFalse(result.truncated)
        self.assertEqual(result.requests, 1)

    async def test_follows_close_time_and_uses_fallback_host(self):
        first = kline_page(START_MS, 3)
        second = kline_page(START_MS + 3 * FOUR_HOURS_MS, 3)
        third = kline_page(START_MS + 6 * FOUR_HOURS_MS, 2)
        request = AsyncMock(side_effect=[first, second, third])

        with patch.object(self.api, "_request_page", request):
            result = await self.api.fetch(START_MS, self.end, page_limit=3)

        self.assertEqual(request.await_count, 3)
        second_call = request.await_args_list[1].args
        self.assertEqual(second_call[0], FALLBACK)
        # next start = close time of the last row + 1 ms
        self.assertEqual(second_call[1], START_MS + 3 * FOUR_HOURS_MS)
        self.assertEqual(len(result.series), 8)
        self.assertFalse(result.truncated)

    async def test_overlapping_pages_are_deduplicated(self):
        first = kline_page(START_MS, 3)
        # Server repeats the last candle of the previous page
        second = [first[-1]] + kline_page(START_MS + 3 * FOUR_HOURS_MS, 1)
        with patch.object(self.api, "_request_page", AsyncMock(side_effect=[first, second])):
            result = await self.api.fetch(START_MS, self.end, page_limit=3)

        times = [c.open_time for c in result.series]
        self.assertEqual(times, sorted(set(times)))
        self.assertEqual(len(times), 4)

    async def test_later_page_failure_truncates(self):
        first = kline_page(START_MS, 3)
        request = AsyncMock(side_effect=[first, TransportError("boom", status=502)])

        with patch.object(self.api, "_request_page", request):
            result = await self.api.fetch(START_MS, self.end, page_limit=3)

        self.assertTrue(result.truncated)
        self.assertEqual(len(result.series), 3)
        self.logger.warning.assert_called()
        self.assertEqual(request.await_count, 2)
        self.assertEqual(result.requests, 2)

    async def test_later_page_network_error_truncates(self):
        first = kline_page(START_MS, 3)
        request = AsyncMock(side_effect=[first, aiohttp.ClientConnectionError("reset")])

        with patch.object(self.api, "_request_page", request):
            result = await self.api.fetch(START_MS, self.end, page_limit=3)

        self.assertTrue(result.truncated)
        self.assertEqual(len(result.series), 3)
        self.assertEqual(result.requests, 2)

    async def test_first_page_failure_propagates(self):
        request = AsyncMock(side_effect=TransportError("down", status=503))
        with patch.object(self.api, "_request_page", request):
            with self.assertRaises(TransportError) as ctx:
                await self.api.fetch(START_MS, self.end)
        self.assertEqual(ctx.exception.status, 503)

    async def test_first_page_decode_failure_propagates(self):
        with patch.object(self.api, "_request_page", AsyncMock(side_effect=DecodeError("bad"))):
            with self.assertRaises(DecodeError):
                await self.api.fetch(START_MS, self.end)

    async def test_empty_first_page_raises(self):
        with patch.object(self.api, "_request_page", AsyncMock(return_value=[])):
            with self.assertRaises(EmptyResultError):
                await self.api.fetch(START_MS, self.end)

    async def test_empty_first_page_allowed(self):
        with patch.object(self.api, "_request_page", AsyncMock(return_value=[])):
            result = await self.api.fetch(START_MS, self.end, allow_empty=True)
        self.assertEqual(len(result.series), 0)
        self.assertFalse(result.truncated)

    async def test_empty_later_page_stops(self):
        first = kline_page(START_MS, 3)
        request = AsyncMock(side_effect=[first, []])
        with patch.object(self.api, "_request_page", request):
            result = await self.api.fetch(START_MS, self.end, page_limit=3)
        self.assertEqual(request.await_count, 2)
        self.assertEqual(len(result.series), 3)
        self.assertFalse(result.truncated)

    async def test_stops_when_next_start_reaches_end(self):
        end = START_MS + 3 * FOUR_HOURS_MS
        request = AsyncMock(return_value=kline_page(START_MS, 3))
        with patch.object(self.api, "_request_page", request):
            result = await self.api.fetch(START_MS, end, page_limit=3)
        request.assert_awaited_once()
        self.assertFalse(result.truncated)

    async def test_stops_without_close_time(self):
        page = [row[:6] for row in kline_page(START_MS, 3)]
        request = AsyncMock(return_value=page)
        with patch.object(self.api, "_request_page", request):
            result = await self.api.fetch(START_MS, self.end, page_limit=3)
        request.assert_awaited_once()
        self.assertEqual(len(result.series), 3)

    async def test_stops_when_cursor_does_not_advance(self):
        # close_time of the last row lies before the requested start
        page = [kline_row(START_MS - 10 * FOUR_HOURS_MS + i, 100.0, step=1) for i in range(3)]
        request = AsyncMock(return_value=page)
        with patch.object(self.api, "_request_page", request):
            await self.api.fetch(START_MS, self.end, page_limit=3)
        request.assert_awaited_once()

    async def test_request_budget_bounds_pagination(self):
        end = START_MS + 4 * FOUR_HOURS_MS
        # budget = ceil(4 candles / 2 per page) + 1 = 3

        def slow_pages(_base_url, start_time, _end_time, limit):
            return kline_page(start_time, limit, step=1)

        request = AsyncMock(side_effect=slow_pages)
        with patch.object(self.api, "_request_page", request):
            result = await self.api.fetch(START_MS, end, page_limit=2)

        self.assertEqual(request.await_count, 3)
        self.assertEqual(result.requests, 3)
        self.assertTrue(result.truncated)

    async def test_rejects_non_positive_page_limit(self):
        with self.assertRaises(ValueError):
            await self.api.fetch(START_MS, self.end, page_limit=0)


class TestBinanceRequest(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.logger = MagicMock(spec=Logger)
        self.api = BinanceKlinesAPI(logger=self.logger, base_url=PRIMARY, fallback_base_url=FALLBACK)

    async def _with_session(self, ctx):
        session = MagicMock()
        session.closed = False
        session.get = MagicMock(return_value=ctx)
        self.api.session = session
        return session

    async def test_sends_query_parameters(self):
        session = await self._with_session(_mock_response(payload=kline_page(START_MS, 2)))

        rows = await self.api._request_page(PRIMARY, START_MS, START_MS + 10, 500)

        self.assertEqual(len(rows), 2)
        args, kwargs = session.get.call_args
        self.assertEqual(args[0], f"{PRIMARY}/api/v3/klines")
        self.assertEqual(kwargs["params"], {
            "symbol": "BTCUSDT",
            "interval": "4h",
            "startTime": START_MS,
            "endTime": START_MS + 10,
            "limit": 500,
        })

    async def test_http_error_raises_transport_error(self):
        await self._with_session(_mock_response(status=429, text="Too many requests"))
        with self.assertRaises(TransportError) as ctx:
            await self.api._request_page(PRIMARY, START_MS, START_MS + 10, 500)
        self.assertEqual(ctx.exception.status, 429)

    async def test_non_array_payload_raises_decode_error(self):
        await self._with_session(_mock_response(payload={"code": -1121, "msg": "Invalid symbol."}))
        with self.assertRaises(DecodeError):
            await self.api._request_page(PRIMARY, START_MS, START_MS + 10, 500)

    async def test_non_array_rows_raise_decode_error(self):
        await self._with_session(_mock_response(payload=[{"open": 1}]))
        with self.assertRaises(DecodeError):
            await self.api._request_page(PRIMARY, START_MS, START_MS + 10, 500)

    async def test_invalid_json_raises_decode_error(self):
        ctx = _mock_response()
        ctx.__aenter__.return_value.json.side_effect = ValueError("Expecting value")
        await self._with_session(ctx)
        with self.assertRaises(DecodeError):
            await self.api._request_page(PRIMARY, START_MS, START_MS + 10, 500)

    async def test_close_releases_session(self):
        session = await self._with_session(_mock_response(payload=[]))
        session.close = AsyncMock()
        await self.api.close()
        session.close.assert_awaited_once()
        self.assertIsNone(self.api.session)


if __name__ == '__main__':
    unittest.main()
