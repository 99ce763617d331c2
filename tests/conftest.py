"""Test configuration and fixtures."""

import pytest

from ivb_transit.core.models import Station

STATION_PAGE = """<!DOCTYPE html>
<html>
<head><meta http-equiv="Content-Type" content="text/html; charset=windows-1252"></head>
<body>
    <div id="content">
        <form id="smartinfoformular" action="/index.php" method="get">
            <label for="stopsearch">Haltestelle</label>
            <select name="si[stopsearch]" id="stopsearch">
                <option value="1001">Hauptbahnhof</option>
                <option value="1002">Maria-Theresien-Straße</option>
                <option value="1003">  Höttinger
                    Au </option>
                <option value="id=1004">Anichstraße / Rathausgalerien</option>
            </select>
            <input type="submit" value="Abfahrten anzeigen">
        </form>
    </div>
</body>
</html>
"""

DEPARTURE_PAGE = """<!DOCTYPE html>
<html>
<body>
    <table class="smartinfo">
        <tr class="echtzeitzeile">
            <td id="siroute_0">1</td>
            <td id="sidir_0">Mühlau</td>
            <td id="sitime_0">3 min</td>
        </tr>
        <tr class="echtzeitzeile">
            <td id="siroute_1">3</td>
            <td id="sitime_1">5 min</td>
        </tr>
        <tr class="echtzeitzeile">
            <td id="siroute_2">O</td>
            <td id="sidir_2">Olympisches Dorf</td>
            <td id="sitime_2">14:32</td>
        </tr>
    </table>
</body>
</html>
"""


@pytest.fixture
def station_page_html():
    """Station list page encoded the way the operator serves it."""
    return STATION_PAGE.encode("windows-1252")


@pytest.fixture
def departure_page_html():
    """Departure board with a broken second row."""
    return DEPARTURE_PAGE.encode("windows-1252")


@pytest.fixture
def sample_stations():
    """Stations as they appear on the station list page."""
    return {
        "Hauptbahnhof": Station(name="Hauptbahnhof", token="1001"),
        "Maria-Theresien-Straße": Station(name="Maria-Theresien-Straße", token="1002"),
        "Höttinger Au": Station(name="Höttinger Au", token="1003"),
        "Anichstraße / Rathausgalerien": Station(
            name="Anichstraße / Rathausgalerien", token="id=1004"
        ),
    }


@pytest.fixture
def cache_file(tmp_path):
    """Path for a temporary station cache file."""
    return tmp_path / "config" / ".ivb.cache"
