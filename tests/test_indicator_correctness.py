import math

import numpy as np
import pytest

from builders import make_candles, wave_closes
from crypto_forecast.indicators import ATR, EMA, MACD, OBV, RSI, SMA, BollingerBands, SupportResistance
from crypto_forecast.indicators.base import TrailingWindow, safe_div


def _run(indicator, candles):
    return [indicator.update(candle) for candle in candles]


def _reference_ema(values, length):
    alpha = 2.0 / (length + 1)
    ema = values[0]
    for value in values[1:]:
        ema = (value - ema) * alpha + ema
    return ema


def test_sma_undefined_until_window_full():
    values = _run(SMA(3), make_candles([1.0, 2.0, 3.0, 4.0]))
    assert math.isnan(values[0]) and math.isnan(values[1])
    assert values[2] == pytest.approx(2.0)
    assert values[3] == pytest.approx(3.0)


def test_sma_recovers_after_large_magnitude_swing():
    closes = [1e16] * 20 + [1.0] * 20
    sma = SMA(20)
    values = _run(sma, make_candles(closes, spread=0.0))
    assert values[-1] == 1.0

    bb = BollingerBands(20, 2.0)
    _run(bb, make_candles(closes, spread=0.0))
    assert bb.middle == 1.0


def test_ema_seeded_with_first_value():
    ema = EMA(10)
    first = ema.update(make_candles([50.0])[0])
    assert first == 50.0
    assert ema.is_ready


def test_obv_sequence():
    obv = OBV()
    values = _run(obv, make_candles([10.0, 12.0, 11.0, 11.0, 13.0], volumes=[100.0] * 5))
    assert values == [0.0, 100.0, 0.0, 0.0, 100.0]


def test_obv_change_uses_value_four_periods_back():
    obv = OBV()
    # OBV: 0, 100, 200, 300, 400, 500
    _run(obv, make_candles([1.0, 2.0, 3.0, 4.0, 5.0, 6.0]))
    assert obv.change_pct == pytest.approx((500.0 - 100.0) / 500.0 * 100.0)


def test_obv_change_zero_denominator_is_finite():
    obv = OBV()
    _run(obv, make_candles([10.0, 11.0, 10.0, 11.0, 10.0, 10.0]))
    assert obv.value == 0.0
    assert math.isfinite(obv.change_pct)


def test_support_resistance_from_closes():
    levels = SupportResistance()
    _run(levels, make_candles([5.0, 3.0, 9.0, 1.0, 7.0]))
    assert (levels.support, levels.resistance) == (1.0, 9.0)


def test_rsi_bounds_on_wave():
    rsi = RSI(14)
    values = [v for v in _run(rsi, make_candles(wave_closes(300))) if not math.isnan(v)]
    assert values
    assert all(0.0 <= v <= 100.0 for v in values)


def test_rsi_monotonic_increase_is_100():
    rsi = RSI(14)
    _run(rsi, make_candles([100.0 + i for i in range(30)]))
    assert rsi.value == 100.0


def test_rsi_monotonic_decrease_is_0():
    rsi = RSI(14)
    _run(rsi, make_candles([100.0 - i for i in range(30)]))
    assert rsi.value == 0.0


def test_rsi_flat_series_is_50():
    rsi = RSI(14)
    _run(rsi, make_candles([100.0] * 20))
    assert rsi.value == 50.0


def test_rsi_defined_at_gate_length():
    rsi = RSI(14)
    _run(rsi, make_candles(wave_closes(14)))
    assert rsi.is_ready
    assert math.isfinite(rsi.value)


def test_macd_histogram_identity_every_period():
    macd = MACD(12, 26, 9)
    for candle in make_candles(wave_closes(120)):
        macd.update(candle)
        assert macd.histogram == macd.macd - macd.signal


def test_macd_matches_reference_emas():
    closes = wave_closes(80)
    macd = MACD(12, 26, 9)
    _run(macd, make_candles(closes))
    expected = _reference_ema(closes, 12) - _reference_ema(closes, 26)
    assert macd.macd == pytest.approx(expected, rel=1e-12)


def test_bollinger_middle_equals_sma20():
    candles = make_candles(wave_closes(60))
    bb = BollingerBands(20, 2.0)
    sma = SMA(20)
    for candle in candles:
        middle = bb.update(candle)
        sma_value = sma.update(candle)
        if math.isnan(sma_value):
            assert math.isnan(middle)
        else:
            assert middle == sma_value


def test_bollinger_uses_population_stddev():
    closes = wave_closes(20)
    bb = BollingerBands(20, 2.0)
    _run(bb, make_candles(closes))
    std = float(np.std(closes))
    assert bb.upper == pytest.approx(np.mean(closes) + 2 * std, rel=1e-9)
    assert bb.lower == pytest.approx(np.mean(closes) - 2 * std, rel=1e-9)


def test_atr_first_true_range_is_high_minus_low():
    atr = ATR(14)
    candle = make_candles([100.0], spread=3.0)[0]
    assert atr.update(candle) == pytest.approx(candle.high - candle.low)


def test_atr_wilder_smoothing_after_warmup():
    candles = make_candles(wave_closes(40), spread=5.0)
    atr = ATR(14)
    _run(atr, candles)

    trs = [candles[0].high - candles[0].low]
    for prev, cur in zip(candles, candles[1:]):
        trs.append(max(cur.high - cur.low, abs(cur.high - prev.close), abs(cur.low - prev.close)))
    expected = sum(trs[:14]) / 14
    for tr in trs[14:]:
        expected = (expected * 13 + tr) / 14
    assert atr.value == pytest.approx(expected, rel=1e-12)


def test_reference_values_on_250_candles():
    closes = wave_closes(250)
    candles = make_candles(closes)
    sma200, ema200, sma50, ema50 = SMA(200), EMA(200), SMA(50), EMA(50)
    for candle in candles:
        for indicator in (sma200, ema200, sma50, ema50):
            indicator.update(candle)

    assert sma200.value == pytest.approx(np.mean(closes[-200:]), rel=1e-6)
    assert ema200.value == pytest.approx(_reference_ema(closes, 200), rel=1e-6)
    expected_cross = np.mean(closes[-50:]) > np.mean(closes[-200:])
    assert (sma50.value > sma200.value) == expected_cross


def test_trailing_window_keeps_last_five_defined_values():
    sma = SMA(3)
    _run(sma, make_candles([float(i) for i in range(1, 11)]))
    history = sma.history()
    assert len(history) == 5
    assert history == pytest.approx((5.0, 6.0, 7.0, 8.0, 9.0))


def test_trailing_window_size_validation():
    with pytest.raises(ValueError):
        TrailingWindow(0)
    window = TrailingWindow(2)
    for value in (1, 2, 3):
        window.append(value)
    assert window.values() == (2, 3)
    assert window.is_full()


def test_safe_div_zero_denominator():
    assert safe_div(5.0, 0.0) == 5.0
    assert safe_div(6.0, 3.0) == 2.0
