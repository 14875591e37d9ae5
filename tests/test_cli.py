from __future__ import annotations

from unittest import mock

import pytest

from duka.config import Config
from duka.main import App, main

ADMIN = ["--user-id", "u-admin", "--email", "owner@duka.co.ke"]


@pytest.fixture
def memory_cfg():
    return Config(store_backend="memory", events_backend="none")


def test_refill_prints_stored_row(memory_cfg, capsys):
    code = main(ADMIN + ["refill", "SKU1", "Unga 2kg", "180", "12"], cfg=memory_cfg)

    out = capsys.readouterr().out
    assert code == 0
    assert "sku=SKU1" in out
    assert "quantity=12" in out
    assert "price=180" in out


@pytest.mark.parametrize(
    "argv,code",
    [
        (ADMIN + ["sell", "missing", "1"], 3),
        (ADMIN + ["refill", "SKU1", "Unga", "10", "0"], 2),
        (ADMIN + ["salespersons", "add", "not-an-email"], 2),
        (["--user-id", "", "--email", "", "whoami"], 6),
    ],
)
def test_failures_map_to_exit_codes(memory_cfg, capsys, argv, code):
    assert main(argv, cfg=memory_cfg) == code
    assert capsys.readouterr().err.startswith("error: ")


def test_products_on_empty_store(memory_cfg, capsys):
    assert main(ADMIN + ["products"], cfg=memory_cfg) == 0
    assert "page 1/1 (0 products)" in capsys.readouterr().out


def test_whoami(memory_cfg, capsys):
    assert main(ADMIN + ["whoami"], cfg=memory_cfg) == 0
    assert capsys.readouterr().out.strip() == "admin"


def test_postgres_backend_wiring(capsys):
    conn = mock.MagicMock()
    with mock.patch("duka.main.pg_connect", return_value=conn), mock.patch(
        "duka.main.ensure_schema"
    ) as ensure:
        code = main(ADMIN + ["init-db"], cfg=Config(store_backend="postgres"))

    assert code == 0
    ensure.assert_called_once_with(conn)
    conn.close.assert_called_once()


def test_kafka_events_are_flushed_on_exit(memory_cfg):
    publisher = mock.Mock()
    encoder = mock.Mock()
    encoder.encode.return_value = b"payload"
    cfg = Config(store_backend="memory", events_backend="kafka")

    with mock.patch("duka.main.build_kafka", return_value=(publisher, encoder)):
        code = main(ADMIN + ["refill", "SKU1", "Unga", "10", "3"], cfg=cfg)

    assert code == 0
    publisher.publish.assert_called_once()
    publisher.flush.assert_called_once_with(15)


def test_unknown_backend_is_rejected():
    with pytest.raises(ValueError):
        App(Config(store_backend="sqlite"))
