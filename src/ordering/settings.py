"""Business limits for order placement, read from the domain configuration.

Values live under ``[custom.orders]`` in ``domain.toml``. Anything missing
falls back to the defaults below so the domain runs without a config file.
"""

from dataclasses import dataclass

from ordering.domain import ordering


@dataclass(frozen=True)
class OrderSettings:
    max_line_quantity: int = 100
    order_number_attempts: int = 5
    payment_capture_delay_seconds: float = 0.0


def order_settings() -> OrderSettings:
    custom = ordering.config.get("custom") or {}
    section = custom.get("orders") or {}
    defaults = OrderSettings()
    return OrderSettings(
        max_line_quantity=int(section.get("max_line_quantity", defaults.max_line_quantity)),
        order_number_attempts=int(section.get("order_number_attempts", defaults.order_number_attempts)),
        payment_capture_delay_seconds=float(
            section.get("payment_capture_delay_seconds", defaults.payment_capture_delay_seconds)
        ),
    )
