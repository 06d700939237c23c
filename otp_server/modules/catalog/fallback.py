"""Countries shown when the provider cannot list them."""

FALLBACK_COUNTRIES: dict[str, str] = {
    "usa": "United States",
    "canada": "Canada",
    "uk": "United Kingdom",
    "germany": "Germany",
    "france": "France",
    "india": "India",
    "australia": "Australia",
    "brazil": "Brazil",
    "japan": "Japan",
    "china": "China",
    "russia": "Russia",
    "mexico": "Mexico",
    "indonesia": "Indonesia",
    "netherlands": "Netherlands",
    "spain": "Spain",
}
