# src/models/station.py

"""Station record model for one monitored location."""

from dataclasses import dataclass
from typing import Any

ADDRESS_UNAVAILABLE = "address unavailable"


@dataclass(frozen=True)
class StationRecord:
    """Current state of one fuel station as read from the source page."""

    location_id: int
    secondary_id: int
    product_id: int
    measured_at: str
    raw_balance: str
    display_name: str
    available_volume: float
    wait_minutes: float
    address: str
    fuel_kind: str
    service_duration_minutes: float
    service_positions: int
    average_load_liters: float
    per_position_minutes: float

    def to_dict(self) -> dict[str, Any]:
        """Serialise using the persisted (Spanish) field names."""
        return {
            "id": self.location_id,
            "un": self.secondary_id,
            "producto_id": self.product_id,
            "fecha": self.measured_at,
            "saldo": self.raw_balance,
            "nombre_estacion": self.display_name,
            "volumen_disponible": self.available_volume,
            "tiempo_espera_minutos": self.wait_minutes,
            "direccion": self.address,
            "tipo_combustible": self.fuel_kind,
            "tiempo_carga": self.service_duration_minutes,
            "mangueras": self.service_positions,
            "carga_promedio": self.average_load_liters,
            "tiempo_carga_por_manguera": self.per_position_minutes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StationRecord":
        """Rebuild a record from its persisted dict form."""
        return cls(
            location_id=int(data["id"]),
            secondary_id=int(data["un"]),
            product_id=int(data["producto_id"]),
            measured_at=str(data["fecha"]),
            raw_balance=str(data["saldo"]),
            display_name=str(data["nombre_estacion"]),
            available_volume=float(data["volumen_disponible"]),
            wait_minutes=float(data["tiempo_espera_minutos"]),
            address=str(data.get("direccion", ADDRESS_UNAVAILABLE)),
            fuel_kind=str(data["tipo_combustible"]),
            service_duration_minutes=float(data["tiempo_carga"]),
            service_positions=int(data["mangueras"]),
            average_load_liters=float(data["carga_promedio"]),
            per_position_minutes=float(
                data["tiempo_carga_por_manguera"]
            ),
        )
