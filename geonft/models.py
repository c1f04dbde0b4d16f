# geonft/models.py
import ipaddress
from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True)
class GeoRecord:
    network: str            # "a.b.c.d/len" as read from the database
    country: Optional[str]  # ISO 3166-1 alpha-2 code, upper case
    source: str             # "MaxMindDB", "MaxMindCSV", "Geofeed"

    @property
    def version(self) -> Optional[int]:
        try:
            return ipaddress.ip_network(self.network, strict=False).version
        except ValueError:
            return None
