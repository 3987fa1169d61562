from collections import deque
from datetime import datetime, timedelta

import pytest

from delivery_average.aggregations import (
    DeliveryEvent,
    MinuteTotals,
    aggregate_minutes,
    moving_average,
    update_window,
    window_average,
)


def _run(rows, window_size=10):
    return moving_average(aggregate_minutes([DeliveryEvent(ts, d) for ts, d in rows]), window_size)


def test_evento_unico():
    out = _run([("2020-01-01 00:00:00", 100)])
    assert out == [
        {"date": "2020-01-01 00:00:00", "average_delivery_time": 0.0},
        {"date": "2020-01-01 00:01:00", "average_delivery_time": 100.0},
    ]


def test_dos_eventos_mismo_minuto():
    out = _run([("2020-01-01 00:00:10", 50), ("2020-01-01 00:00:20", 150)])
    assert [r["average_delivery_time"] for r in out] == [0.0, 200.0]
    assert isinstance(out[1]["average_delivery_time"], float)


def test_eventos_separados_30_minutos():
    out = _run([("2020-01-01 00:00:00", 100), ("2020-01-01 00:30:00", 300)], window_size=10)
    # 00:00 .. 00:31 inclusive
    assert len(out) == 32
    avgs = [r["average_delivery_time"] for r in out]
    assert avgs[0] == 0.0
    assert avgs[1:11] == [100.0] * 10
    # 20 minutos fuera del alcance de ambos eventos
    assert avgs[11:31] == [0.0] * 20
    assert avgs[31] == 300.0


def test_ejemplo_del_log_de_muestra():
    out = _run([
        ("2018-12-26 18:11:08.509654", 20),
        ("2018-12-26 18:15:19.903159", 31),
        ("2018-12-26 18:23:19.903159", 54),
    ])
    assert out[0] == {"date": "2018-12-26 18:11:00", "average_delivery_time": 0.0}
    assert [r["average_delivery_time"] for r in out] == [
        0.0, 20.0, 20.0, 20.0, 20.0, 25.5, 25.5, 25.5, 25.5, 25.5, 25.5, 31.0, 31.0, 42.5,
    ]
    assert out[-1]["date"] == "2018-12-26 18:24:00"


def test_numero_de_registros_igual_al_rango():
    minutes = aggregate_minutes([
        DeliveryEvent("2021-03-01 10:00:00", 5),
        DeliveryEvent("2021-03-01 11:15:30", 9),
    ])
    out = moving_average(minutes, 3)
    expected = int((minutes.last_minute - minutes.first_minute) / timedelta(minutes=1)) + 1
    assert len(out) == expected
    dates = [r["date"] for r in out]
    assert dates == sorted(dates)


def test_media_coincide_con_calculo_directo():
    start = datetime(2022, 5, 1, 8, 0)
    totals = {start + timedelta(minutes=i): v for i, v in enumerate([0, 4, 0, 0, 9, 1, 0, 0, 0, 0, 0, 6, 2])}
    minutes = MinuteTotals(totals, start, start + timedelta(minutes=len(totals) - 1))
    series = [totals[start + timedelta(minutes=i)] for i in range(len(totals))]

    for w in (1, 2, 3, 5, 10, 20):
        out = moving_average(minutes, w)
        for k, rec in enumerate(out):
            window = series[max(0, k + 1 - w):k + 1]
            pos = [v for v in window if v > 0]
            expected = sum(pos) / len(pos) if pos else 0
            assert rec["average_delivery_time"] == expected


def test_ventana_nunca_supera_su_capacidad():
    for w in (1, 2, 7):
        q: deque = deque()
        for v in range(25):
            update_window(q, w, v)
            assert len(q) <= w
        assert list(q) == list(range(25 - w, 25))


def test_window_size_cero_siempre_cero():
    out = _run([("2020-01-01 00:00:00", 100), ("2020-01-01 00:02:00", 50)], window_size=0)
    assert len(out) == 4
    assert all(r["average_delivery_time"] == 0.0 for r in out)


def test_duraciones_todas_cero():
    out = _run([("2020-01-01 00:00:00", 0), ("2020-01-01 00:04:00", 0)])
    assert len(out) == 6
    assert all(r["average_delivery_time"] == 0.0 for r in out)


def test_window_average_ignora_ceros():
    assert window_average([0, 10, 0, 20]) == 15.0
    assert window_average([0, 0]) == 0.0
    assert window_average([]) == 0.0


def test_entrada_vacia_no_produce_registros():
    assert moving_average(aggregate_minutes([])) == []


def test_entrada_desordenada_no_produce_registros():
    # el último evento (en orden de entrada) es anterior al primero
    assert _run([("2020-01-01 00:10:00", 1), ("2020-01-01 00:01:00", 2)]) == []


def test_window_size_negativo():
    with pytest.raises(ValueError):
        _run([("2020-01-01 00:00:00", 1)], window_size=-1)
