"""Offline country-centroid geocoding used when records carry no coordinates."""

from typing import Dict, Optional, Tuple

# ISO 3166-1 alpha-2 code -> approximate country centroid (lat, lon)
COUNTRY_CENTROIDS: Dict[str, Tuple[float, float]] = {
    "AD": (42.546245, 1.601554),
    "AE": (23.424076, 53.847818),
    "AR": (-38.416097, -63.616672),
    "AT": (47.516231, 14.550072),
    "AU": (-25.274398, 133.775136),
    "BD": (23.684994, 90.356331),
    "BE": (50.503887, 4.469936),
    "BG": (42.733883, 25.48583),
    "BR": (-14.235004, -51.92528),
    "CA": (56.130366, -106.346771),
    "CH": (46.818188, 8.227512),
    "CL": (-35.675147, -71.542969),
    "CN": (35.86166, 104.195397),
    "CO": (4.570868, -74.297333),
    "CZ": (49.817492, 15.472962),
    "DE": (51.165691, 10.451526),
    "DK": (56.26392, 9.501785),
    "DZ": (28.033886, 1.659626),
    "EG": (26.820553, 30.802498),
    "ES": (40.463667, -3.74922),
    "FI": (61.92411, 25.748151),
    "FO": (61.892635, -6.911806),
    "FR": (46.227638, 2.213749),
    "GB": (55.378051, -3.435973),
    "GR": (39.074208, 21.824312),
    "HK": (22.396428, 114.109497),
    "HU": (47.162494, 19.503304),
    "ID": (-0.789275, 113.921327),
    "IE": (53.41291, -8.24389),
    "IL": (31.046051, 34.851612),
    "IN": (20.593684, 78.96288),
    "IQ": (33.223191, 43.679291),
    "IR": (32.427908, 53.688046),
    "IS": (64.963051, -19.020835),
    "IT": (41.87194, 12.56738),
    "JP": (36.204824, 138.252924),
    "KE": (-0.023559, 37.906193),
    "KR": (35.907757, 127.766922),
    "MA": (31.791702, -7.09262),
    "MX": (23.634501, -102.552784),
    "MY": (4.210484, 101.975766),
    "NG": (9.081999, 8.675277),
    "NL": (52.132633, 5.291266),
    "NO": (60.472024, 8.468946),
    "NZ": (-40.900557, 174.885971),
    "PE": (-9.189967, -75.015152),
    "PH": (12.879721, 121.774017),
    "PK": (30.375321, 69.345116),
    "PL": (51.919438, 19.145136),
    "PT": (39.399872, -8.224454),
    "RO": (45.943161, 24.96676),
    "RS": (44.016521, 21.005859),
    "RU": (61.52401, 105.318756),
    "SA": (23.885942, 45.079162),
    "SE": (60.128161, 18.643501),
    "SG": (1.352083, 103.819836),
    "TH": (15.870032, 100.992541),
    "TR": (38.963745, 35.243322),
    "TW": (23.69781, 120.960515),
    "UA": (48.379433, 31.16558),
    "US": (37.09024, -95.712891),
    "VN": (14.058324, 108.277199),
    "ZA": (-30.559482, 22.937506),
}

COUNTRY_NAMES: Dict[str, str] = {
    "AD": "Andorra", "AE": "United Arab Emirates", "AR": "Argentina", "AT": "Austria",
    "AU": "Australia", "BD": "Bangladesh", "BE": "Belgium", "BG": "Bulgaria",
    "BR": "Brazil", "CA": "Canada", "CH": "Switzerland", "CL": "Chile",
    "CN": "China", "CO": "Colombia", "CZ": "Czechia", "DE": "Germany",
    "DK": "Denmark", "DZ": "Algeria", "EG": "Egypt", "ES": "Spain",
    "FI": "Finland", "FO": "Faroe Islands", "FR": "France", "GB": "United Kingdom",
    "GR": "Greece", "HK": "Hong Kong", "HU": "Hungary", "ID": "Indonesia",
    "IE": "Ireland", "IL": "Israel", "IN": "India", "IQ": "Iraq",
    "IR": "Iran", "IS": "Iceland", "IT": "Italy", "JP": "Japan",
    "KE": "Kenya", "KR": "South Korea", "MA": "Morocco", "MX": "Mexico",
    "MY": "Malaysia", "NG": "Nigeria", "NL": "Netherlands", "NO": "Norway",
    "NZ": "New Zealand", "PE": "Peru", "PH": "Philippines", "PK": "Pakistan",
    "PL": "Poland", "PT": "Portugal", "RO": "Romania", "RS": "Serbia",
    "RU": "Russia", "SA": "Saudi Arabia", "SE": "Sweden", "SG": "Singapore",
    "TH": "Thailand", "TR": "Turkey", "TW": "Taiwan", "UA": "Ukraine",
    "US": "United States", "VN": "Vietnam", "ZA": "South Africa",
}

# Lowercase name variants -> code
COUNTRY_ALIASES: Dict[str, str] = {
    **{name.lower(): code for code, name in COUNTRY_NAMES.items()},
    "usa": "US",
    "u.s.": "US",
    "u.s.a.": "US",
    "united states of america": "US",
    "america": "US",
    "uk": "GB",
    "u.k.": "GB",
    "great britain": "GB",
    "britain": "GB",
    "england": "GB",
    "scotland": "GB",
    "wales": "GB",
    "deutschland": "DE",
    "russian federation": "RU",
    "korea": "KR",
    "republic of korea": "KR",
    "uae": "AE",
    "holland": "NL",
    "the netherlands": "NL",
    "czech republic": "CZ",
    "brasil": "BR",
}


def find_country_centroid(name: Optional[str], code: Optional[str] = None) -> Optional[Dict]:
    """
    Resolve a country to its centroid.

    Tries the ISO code, then the alias table, then the raw name read as a code.

    Returns:
        {"code", "lat", "lon"} or None when nothing matches
    """
    candidates = []
    if code:
        candidates.append(str(code).strip().upper())
    if name:
        raw = str(name).strip()
        alias = COUNTRY_ALIASES.get(raw.lower())
        if alias:
            candidates.append(alias)
        candidates.append(raw.upper())

    for candidate in candidates:
        centroid = COUNTRY_CENTROIDS.get(candidate)
        if centroid:
            return {"code": candidate, "lat": centroid[0], "lon": centroid[1]}
    return None
