"""
Airport Reference Data

Static list of the airports offered by autocomplete, plus typical block
times for common routes. Flight durations are estimates, not live data.
"""

from typing import Dict, List

from pydantic import BaseModel


class Airport(BaseModel):
    code: str
    name: str
    city: str
    country: str


AIRPORTS: List[Airport] = [
    # US
    Airport(code="JFK", name="John F. Kennedy International", city="New York", country="USA"),
    Airport(code="LAX", name="Los Angeles International", city="Los Angeles", country="USA"),
    Airport(code="ORD", name="O'Hare International", city="Chicago", country="USA"),
    Airport(code="DFW", name="Dallas/Fort Worth International", city="Dallas", country="USA"),
    Airport(code="DEN", name="Denver International", city="Denver", country="USA"),
    Airport(code="SFO", name="San Francisco International", city="San Francisco", country="USA"),
    Airport(code="SEA", name="Seattle-Tacoma International", city="Seattle", country="USA"),
    Airport(code="MIA", name="Miami International", city="Miami", country="USA"),
    Airport(code="ATL", name="Hartsfield-Jackson Atlanta International", city="Atlanta", country="USA"),
    Airport(code="BOS", name="Logan International", city="Boston", country="USA"),
    Airport(code="LAS", name="Harry Reid International", city="Las Vegas", country="USA"),
    Airport(code="PHX", name="Sky Harbor International", city="Phoenix", country="USA"),
    Airport(code="IAH", name="George Bush Intercontinental", city="Houston", country="USA"),
    Airport(code="MSP", name="Minneapolis-Saint Paul International", city="Minneapolis", country="USA"),
    Airport(code="DTW", name="Detroit Metropolitan", city="Detroit", country="USA"),
    Airport(code="PHL", name="Philadelphia International", city="Philadelphia", country="USA"),
    Airport(code="LGA", name="LaGuardia", city="New York", country="USA"),
    Airport(code="BWI", name="Baltimore/Washington International", city="Baltimore", country="USA"),
    Airport(code="SLC", name="Salt Lake City International", city="Salt Lake City", country="USA"),
    Airport(code="DCA", name="Ronald Reagan Washington National", city="Washington", country="USA"),
    # International
    Airport(code="LHR", name="Heathrow", city="London", country="UK"),
    Airport(code="CDG", name="Charles de Gaulle", city="Paris", country="France"),
    Airport(code="AMS", name="Amsterdam Airport Schiphol", city="Amsterdam", country="Netherlands"),
    Airport(code="FRA", name="Frankfurt am Main", city="Frankfurt", country="Germany"),
    Airport(code="MAD", name="Adolfo Suárez Madrid-Barajas", city="Madrid", country="Spain"),
    Airport(code="FCO", name="Leonardo da Vinci-Fiumicino", city="Rome", country="Italy"),
    Airport(code="DXB", name="Dubai International", city="Dubai", country="UAE"),
    Airport(code="DOH", name="Hamad International", city="Doha", country="Qatar"),
    Airport(code="SIN", name="Singapore Changi", city="Singapore", country="Singapore"),
    Airport(code="HKG", name="Hong Kong International", city="Hong Kong", country="China"),
    Airport(code="NRT", name="Narita International", city="Tokyo", country="Japan"),
    Airport(code="ICN", name="Incheon International", city="Seoul", country="South Korea"),
    Airport(code="SYD", name="Sydney Kingsford Smith", city="Sydney", country="Australia"),
    Airport(code="YYZ", name="Toronto Pearson International", city="Toronto", country="Canada"),
    Airport(code="YVR", name="Vancouver International", city="Vancouver", country="Canada"),
    Airport(code="MEX", name="Benito Juárez International", city="Mexico City", country="Mexico"),
    Airport(code="GRU", name="São Paulo/Guarulhos International", city="São Paulo", country="Brazil"),
    Airport(code="EZE", name="Ministro Pistarini International", city="Buenos Aires", country="Argentina"),
]

# Hours, keyed "ORIGIN-DESTINATION"
FLIGHT_DURATIONS: Dict[str, float] = {
    "JFK-LAX": 6.5,
    "LAX-JFK": 6.5,
    "JFK-SFO": 6.5,
    "SFO-JFK": 6.5,
    "ORD-LAX": 4.5,
    "LAX-ORD": 4.5,
    "DFW-LAX": 3.5,
    "LAX-DFW": 3.5,
    "JFK-LHR": 7.5,
    "LHR-JFK": 8.5,
    "LAX-NRT": 11,
    "NRT-LAX": 10,
}

DEFAULT_FLIGHT_HOURS = 4.0
MAX_SEARCH_RESULTS = 20
