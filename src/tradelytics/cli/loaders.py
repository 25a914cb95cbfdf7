"""Trade and account file loading for the CLI.

Supported trade files:
    - CSV: one trade per row, header row with TradeInput field names
    - JSON / YAML: a list of trades, or a mapping with a "trades" list

Example CSV:
    trade_id,account_id,asset,entry_price,stop_loss_price,entry_timestamp,exit_price,exit_timestamp
    t1,acc-1,ES,5000,4990,2025-01-06 09:30:00,5020,2025-01-06 10:15:00
"""

import json
from pathlib import Path
from typing import Any

import click
import pandas as pd
import yaml
from pydantic import ValidationError

from tradelytics.analytics.models import Account, TradeInput

TRADE_FILE_SUFFIXES = (".csv", ".json", ".yaml", ".yml")


class TradeFileError(click.ClickException):
    """A trade or account file could not be read or validated."""


def _read_structured(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                return json.load(f)
            return yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise TradeFileError(f"Could not parse {path.name}: {e}") from e


def _read_csv_rows(path: Path) -> list[dict[str, Any]]:
    try:
        # Strings only; pydantic does the type coercion
        df = pd.read_csv(path, dtype=str, skipinitialspace=True)
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError as e:
        raise TradeFileError(f"Could not parse {path.name}: {e}") from e

    df = df.astype(object).where(df.notna(), None)
    return df.to_dict(orient="records")


def load_trade_rows(path: Path) -> list[dict[str, Any]]:
    """
    Read raw trade rows from a file.

    Raises:
        TradeFileError: Unsupported suffix, unparsable content or wrong shape
    """
    suffix = path.suffix.lower()
    if suffix not in TRADE_FILE_SUFFIXES:
        raise TradeFileError(f"Unsupported trade file type '{suffix}'. Use one of: {', '.join(TRADE_FILE_SUFFIXES)}")

    if suffix == ".csv":
        return _read_csv_rows(path)

    data = _read_structured(path)
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("trades", [])
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise TradeFileError(f"{path.name} must contain a list of trades (or a mapping with a 'trades' list)")
    return data


def load_trades(path: Path) -> list[TradeInput]:
    """
    Load and validate trades from a CSV, JSON or YAML file.

    Empty cells are treated as missing fields.

    Raises:
        TradeFileError: If the file cannot be read or a row fails validation
    """
    trades: list[TradeInput] = []
    for row_number, row in enumerate(load_trade_rows(path), start=1):
        fields = {key: value for key, value in row.items() if value is not None and value != ""}
        try:
            trades.append(TradeInput.model_validate(fields))
        except ValidationError as e:
            raise TradeFileError(f"Invalid trade in {path.name} (row {row_number}): {e}") from e
    return trades


def load_account(path: Path) -> Account:
    """
    Load account metadata from a JSON or YAML mapping.

    Raises:
        TradeFileError: If the file is not a mapping or fails validation
    """
    data = _read_structured(path)
    if not isinstance(data, dict):
        raise TradeFileError(f"{path.name} must contain an account mapping")
    try:
        return Account.model_validate(data)
    except ValidationError as e:
        raise TradeFileError(f"Invalid account in {path.name}: {e}") from e
