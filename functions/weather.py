"""Current weather via wttr.in."""

from urllib.parse import quote

import httpx
from pydantic import BaseModel, Field

from funcall_server.capabilities import Capability

WTTR_URL = "https://wttr.in/{location}"


class WeatherArgs(BaseModel):
    location: str = Field(min_length=1)


def get_weather(location: str) -> str:
    """Fetch a one-line weather report for *location*.

    Raises:
        httpx.HTTPError: If wttr.in cannot be reached or answers with an error.
    """
    url = WTTR_URL.format(location=quote(location, safe=""))
    response = httpx.get(url, params={"format": "3"}, timeout=10.0)
    response.raise_for_status()
    return f"Weather in {location}: {response.text.strip()}"


def register():
    return Capability(
        name="get_weather",
        handler=get_weather,
        args_model=WeatherArgs,
        description="Current weather from wttr.in",
    )
