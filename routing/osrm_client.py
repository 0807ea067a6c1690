#Purpose: The OSRM “adapter/client”.
#Sole responsibility: talk to OSRM via HTTP and return normalized outputs.
#Encapsulates OSRM-specific details:
#coordinate formatting (lon,lat)
#URL construction (/route)
#error handling (non-Ok codes, transport failures)
#parsing response JSON (incl. GeoJSON geometry) into our (lat, lng) shape
#It should not contain matching rules.


from dotenv import load_dotenv
import os
from typing import List, Dict, Any, Optional
import requests

from routing.geometry import LatLon

# Read OSRM base URL from environment
# Example in .env:
# OSRM_BASE_URL=http://router.project-osrm.org
load_dotenv()
OSRM_BASE_URL = os.getenv("OSRM_BASE_URL")


class OSRMError(Exception):
    """Custom exception for OSRM client errors."""
    pass


class OSRMClient:
    """
    OSRM Adapter / Client

    Sole responsibility:
    - Talk to OSRM via HTTP
    - Convert internal (lat, lng) → OSRM (lon,lat) and back
    - Return normalized outputs

    """
    def __init__(self, profile: str = "driving", timeout: int = 5, base_url: Optional[str] = None):
        self.base_url = (base_url or OSRM_BASE_URL or "").rstrip("/")
        self.timeout = timeout #the time to wait for a response from OSRM before giving up
        self.profile = profile #the mode of transportation (driving, walking, cycling)

        if not self.base_url:
            raise ValueError("OSRM base URL not set. Please set OSRM_BASE_URL in the .env file.")

    #----------------
    # Internal helpers
    #----------------
    def format_coordinates(self, coords: List[LatLon]) -> str:
        """Convert list of (lat, lng) to OSRM format 'lng,lat;lng,lat;...'"""
        return ';'.join(f"{lng},{lat}" for lat, lng in coords)

    def _get(self, url: str, params: Dict[str, str]) -> Dict[str, Any]:
        try:
            response = requests.get(url, params=params, timeout=self.timeout)
            data = response.json()
        except requests.RequestException as exc:
            raise OSRMError(f"OSRM request failed: {exc}") from exc
        except ValueError as exc:
            raise OSRMError(f"OSRM returned a non-JSON response (HTTP {response.status_code})") from exc

        #validating OSRM response
        if data.get("code") != "Ok":
            raise OSRMError(f"OSRM error: {data.get('message', data.get('code', 'Unknown error'))}")
        return data

    #----------------
    # Public methods
    #----------------
    def compute_route(self, coordinates: List[LatLon], geometry: bool = False) -> Dict[str, Any]:
        """
        calls the OSRM /route endpoint with the given coordinates and
        returns a dict with distance and duration (and the polyline on request)

        Returns:
            {
                "distance": float, # in meters
                "duration": float, # in seconds
                "geometry": [(lat, lng), ...], # only when geometry=True
            }
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required to compute a route.")

        url = f"{self.base_url}/route/v1/{self.profile}/{self.format_coordinates(coordinates)}"
        if geometry:
            params = {"overview": "full", "geometries": "geojson"}
        else:
            params = {"overview": "false"} # we don't need the geometry of the route

        data = self._get(url, params)

        routes = data.get("routes") or []
        if not routes:
            raise OSRMError("OSRM returned no routes")
        route = routes[0] #take the first route (OSRM may return alternatives)

        #Normalize output to internal format
        result: Dict[str, Any] = {
            "distance": route["distance"],
            "duration": route["duration"],
        }
        if geometry:
            # GeoJSON is [lon, lat]
            result["geometry"] = [(lat, lng) for lng, lat in route["geometry"]["coordinates"]]
        return result
