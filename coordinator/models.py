# coordinator/models.py
"""
Modelos de dados dos destinatários lidos da planilha.

Colunas da planilha: A=ID, B=Link Google Maps, C=Latitude, D=Longitude,
E=Tipo de destinatário, F=Encomendas, G=Faculdade, H=Telefone,
I=Telefone secundário, J=Estado
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class DeliveryStatus(str, Enum):
    PENDING = "Pending"
    ON_THE_WAY = "On the way"
    DELIVERED = "Delivered"

    @classmethod
    def from_sheet(cls, value: Optional[str]) -> "DeliveryStatus":
        """Valor lido da planilha. Desconhecido ou vazio vira Pending."""
        texto = str(value or "").strip().lower()
        for status in cls:
            if status.value.lower() == texto:
                return status
        return cls.PENDING

    @classmethod
    def from_input(cls, value: Any) -> Optional["DeliveryStatus"]:
        """Valor recebido pela API. Só aceita os três valores exatos."""
        if not isinstance(value, str):
            return None
        for status in cls:
            if status.value == value:
                return status
        return None


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass
class Recipient:
    id: str
    map_link: str = ""
    coordinates: Optional[Coordinates] = None
    coordinates_error: bool = False
    recipient_type: str = ""
    parcels: int = 0
    faculty: str = ""
    phone: str = ""
    secondary_phone: str = ""
    status: DeliveryStatus = field(default=DeliveryStatus.PENDING)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "map_link": self.map_link,
            "coordinates": self.coordinates.to_dict() if self.coordinates else None,
            "coordinates_error": self.coordinates_error,
            "recipient_type": self.recipient_type,
            "parcels": self.parcels,
            "faculty": self.faculty,
            "phone": self.phone,
            "secondary_phone": self.secondary_phone,
            "status": self.status.value,
        }
