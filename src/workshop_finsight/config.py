# Workshop FinSight - Financial reporting engine for workshop & fleet back offices
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Workshop FinSight.

This module is responsible for:
- loading the application configuration from a TOML file,
- exposing the business rules (statuses, roles, labels) used by the engine,
- exposing typed dataclasses used by the rest of the application.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import tomllib  # Python 3.11+

import pandas as pd

DEFAULT_CONFIG_FILE = "workshop_finsight_config.toml"


@dataclass(frozen=True)
class BusinessRules:
    """
    Business vocabulary shared by the aggregation and commission engines.

    The defaults match the labels stored by the back office: sales are
    excluded when cancelled, services count once completed or delivered,
    and staff holding the technician role are paid from the technician
    payroll bucket.

    Timestamps carrying an offset are placed on the calendar day of
    ``timezone``, the timezone the shop reports in.
    """

    technician_role: str = "Técnico"
    cancelled_sale_status: str = "Cancelado"
    completed_service_statuses: tuple[str, ...] = ("Completado", "Entregado")
    sale_operation_type: str = "Venta"
    service_movement_type: str = "Servicio"
    default_service_type: str = "Servicio General"
    timezone: str = "UTC"


DEFAULT_RULES = BusinessRules()


@dataclass(frozen=True)
class DisplayConfig:
    """Display options for the CLI tables and CSV exports."""

    mode: str = "table"
    decimals: int = 2
    output_dir: Path = Path("data/output")


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for Workshop FinSight.

    This aggregates:
    - the snapshot directory the CLI reads collections from,
    - the business rules,
    - the standard rental deposit used when a driver has none recorded,
    - display and logging options.
    """

    data_dir: Path
    rules: BusinessRules = field(default_factory=BusinessRules)
    standard_deposit_amount: float = 0.0
    display: DisplayConfig = field(default_factory=DisplayConfig)
    log_level: str = "WARNING"


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return a TOML table by name, or an empty mapping if absent/invalid."""
    value = raw.get(name) or {}
    if not isinstance(value, Mapping):
        return {}
    return value


def _parse_timezone(value: Any) -> str:
    """
    Validate an IANA timezone name such as "America/Mexico_City".

    Raises:
        ValueError: if the name is not a known timezone.
    """
    name = str(value).strip()
    message = f"Invalid value for 'business.timezone': unknown timezone {name!r}."
    if not name:
        raise ValueError(message)
    try:
        pd.Timestamp("2000-01-01", tz=name)
    except (KeyError, ValueError, TypeError) as exc:
        raise ValueError(message) from exc
    return name


def _parse_business_rules(section: Mapping[str, Any]) -> BusinessRules:
    """
    Build BusinessRules from the [business] table, keeping defaults for
    every key that is not provided.

    Raises:
        ValueError: if completed_service_statuses is not a list of strings.
    """
    defaults = BusinessRules()

    statuses_raw = section.get("completed_service_statuses")
    if statuses_raw is None:
        statuses = defaults.completed_service_statuses
    else:
        if not isinstance(statuses_raw, list) or not all(
            isinstance(s, str) for s in statuses_raw
        ):
            raise ValueError(
                "Invalid value for 'business.completed_service_statuses', "
                "expected a list of strings."
            )
        statuses = tuple(statuses_raw)

    return BusinessRules(
        technician_role=str(section.get("technician_role", defaults.technician_role)),
        cancelled_sale_status=str(
            section.get("cancelled_sale_status", defaults.cancelled_sale_status)
        ),
        completed_service_statuses=statuses,
        sale_operation_type=str(
            section.get("sale_operation_type", defaults.sale_operation_type)
        ),
        service_movement_type=str(
            section.get("service_movement_type", defaults.service_movement_type)
        ),
        default_service_type=str(
            section.get("default_service_type", defaults.default_service_type)
        ),
        timezone=_parse_timezone(section.get("timezone", defaults.timezone)),
    )


def default_app_config(base_dir: Optional[Path] = None) -> AppConfig:
    """Return the built-in configuration, resolving paths against base_dir."""
    base = base_dir or Path.cwd()
    return AppConfig(
        data_dir=(base / "data/snapshot").resolve(),
        display=DisplayConfig(output_dir=(base / "data/output").resolve()),
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the Workshop FinSight configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [data]
        ``dir``: directory holding the collection snapshot files.

    [business]
        Status labels, technician role, operation type labels and the
        reporting ``timezone``.

    [rentals]
        ``standard_deposit_amount``: deposit required from drivers whose
        record carries no explicit required deposit.

    [display]
        ``mode`` (table | csv | both), ``decimals`` and ``output_dir``.

    [logging]
        ``level``: name of the root logging level used by the CLI.

    All file paths in the TOML are resolved relative to the directory of
    the TOML file itself.

    If no path is given and the default file does not exist in the current
    directory, built-in defaults are returned. An explicit path that does
    not exist raises FileNotFoundError.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        if not config_file.is_file():
            return default_app_config()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Data section
    data_section = _section(raw, "data")
    data_dir = (base_dir / str(data_section.get("dir") or "data/snapshot")).resolve()

    # 2) Business rules
    rules = _parse_business_rules(_section(raw, "business"))

    # 3) Rentals
    rentals_section = _section(raw, "rentals")
    try:
        standard_deposit = float(rentals_section.get("standard_deposit_amount", 0.0))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'rentals.standard_deposit_amount'. Expected a number."
        ) from exc

    # 4) Display options
    display_section = _section(raw, "display")
    display_mode = str(display_section.get("mode", "table"))
    if display_mode not in {"table", "csv", "both"}:
        raise ValueError(
            f"Invalid display mode {display_mode!r}, expected table, csv or both."
        )
    try:
        decimals = int(display_section.get("decimals", 2))
    except (TypeError, ValueError):
        decimals = 2
    output_dir = (
        base_dir / str(display_section.get("output_dir") or "data/output")
    ).resolve()

    # 5) Logging
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level", "WARNING")).upper()

    return AppConfig(
        data_dir=data_dir,
        rules=rules,
        standard_deposit_amount=standard_deposit,
        display=DisplayConfig(mode=display_mode, decimals=decimals, output_dir=output_dir),
        log_level=log_level,
    )
