"""District reference data and adjacency lookups.

Static geography for proximity scoring: the twenty Paris arrondissements
plus the nearby cities players commonly pick. Pure lookup, no mutable state.

The adjacency table is authored as a directed map, one neighbour list per
district, and nothing guarantees both directions get written down when it
is edited. DistrictGraph treats two districts as adjacent when either one
lists the other, so the table is used as authored.
"""

from collections.abc import Iterable, Mapping

from playmatch.core.types import District, Zone

ZONE_LABELS: dict[Zone, dict[str, str]] = {
    Zone.CENTRE: {"en": "Paris Centre", "fr": "Paris Centre"},
    Zone.RIVE_DROITE: {"en": "Right Bank", "fr": "Rive Droite"},
    Zone.RIVE_GAUCHE: {"en": "Left Bank", "fr": "Rive Gauche"},
    Zone.BANLIEUE: {"en": "Nearby Cities", "fr": "Proche Banlieue"},
}

PARIS_DISTRICTS: tuple[District, ...] = (
    # Centre
    District("75001", "1st", "1er - Louvre", Zone.CENTRE, ("Châtelet", "Les Halles", "Palais Royal")),
    District("75002", "2nd", "2e - Bourse", Zone.CENTRE, ("Sentier", "Montorgueil")),
    District("75003", "3rd", "3e - Temple", Zone.CENTRE, ("Marais Nord", "Arts et Métiers")),
    District("75004", "4th", "4e - Hôtel de Ville", Zone.CENTRE, ("Marais", "Île Saint-Louis", "Bastille")),
    # Rive droite
    District("75008", "8th", "8e - Élysée", Zone.RIVE_DROITE, ("Champs-Élysées", "Madeleine", "Étoile")),
    District("75009", "9th", "9e - Opéra", Zone.RIVE_DROITE, ("Opéra", "Pigalle", "Grands Boulevards")),
    District("75010", "10th", "10e - Entrepôt", Zone.RIVE_DROITE, ("Canal Saint-Martin", "Gare du Nord", "Gare de l'Est")),
    District("75011", "11th", "11e - Popincourt", Zone.RIVE_DROITE, ("Oberkampf", "Bastille", "République")),
    District("75012", "12th", "12e - Reuilly", Zone.RIVE_DROITE, ("Bercy", "Nation", "Bois de Vincennes")),
    District("75016", "16th", "16e - Passy", Zone.RIVE_DROITE, ("Trocadéro", "Auteuil", "Bois de Boulogne")),
    District("75017", "17th", "17e - Batignolles", Zone.RIVE_DROITE, ("Batignolles", "Ternes", "Épinettes")),
    District("75018", "18th", "18e - Montmartre", Zone.RIVE_DROITE, ("Montmartre", "Clignancourt", "La Chapelle")),
    District("75019", "19th", "19e - Buttes-Chaumont", Zone.RIVE_DROITE, ("Buttes-Chaumont", "La Villette", "Belleville")),
    District("75020", "20th", "20e - Ménilmontant", Zone.RIVE_DROITE, ("Belleville", "Père Lachaise", "Gambetta")),
    # Rive gauche
    District("75005", "5th", "5e - Panthéon", Zone.RIVE_GAUCHE, ("Quartier Latin", "Mouffetard", "Jardin des Plantes")),
    District("75006", "6th", "6e - Luxembourg", Zone.RIVE_GAUCHE, ("Saint-Germain", "Odéon", "Luxembourg")),
    District("75007", "7th", "7e - Palais-Bourbon", Zone.RIVE_GAUCHE, ("Tour Eiffel", "Invalides", "Musée d'Orsay")),
    District("75013", "13th", "13e - Gobelins", Zone.RIVE_GAUCHE, ("Bibliothèque", "Chinatown", "Butte-aux-Cailles")),
    District("75014", "14th", "14e - Observatoire", Zone.RIVE_GAUCHE, ("Montparnasse", "Denfert", "Alésia")),
    District("75015", "15th", "15e - Vaugirard", Zone.RIVE_GAUCHE, ("Montparnasse", "Javel", "Grenelle")),
)

NEARBY_CITIES: tuple[District, ...] = (
    District("boulogne", "Boulogne-Billancourt", "Boulogne-Billancourt", Zone.BANLIEUE),
    District("levallois", "Levallois-Perret", "Levallois-Perret", Zone.BANLIEUE),
    District("neuilly", "Neuilly-sur-Seine", "Neuilly-sur-Seine", Zone.BANLIEUE),
    District("issy", "Issy-les-Moulineaux", "Issy-les-Moulineaux", Zone.BANLIEUE),
    District("vincennes", "Vincennes", "Vincennes", Zone.BANLIEUE),
    District("saint-mande", "Saint-Mandé", "Saint-Mandé", Zone.BANLIEUE),
    District("montreuil", "Montreuil", "Montreuil", Zone.BANLIEUE),
    District("saint-denis", "Saint-Denis", "Saint-Denis", Zone.BANLIEUE),
    District("pantin", "Pantin", "Pantin", Zone.BANLIEUE),
    District("clichy", "Clichy", "Clichy", Zone.BANLIEUE),
)

# Districts that share a border. Directed as authored; see module docstring.
DISTRICT_ADJACENCY: dict[str, tuple[str, ...]] = {
    "75001": ("75002", "75003", "75004", "75006", "75007", "75008", "75009"),
    "75002": ("75001", "75003", "75009", "75010"),
    "75003": ("75001", "75002", "75004", "75010", "75011"),
    "75004": ("75001", "75003", "75005", "75011", "75012"),
    "75005": ("75004", "75006", "75013", "75014"),
    "75006": ("75001", "75005", "75007", "75014", "75015"),
    "75007": ("75001", "75006", "75008", "75015", "75016"),
    "75008": ("75001", "75007", "75009", "75016", "75017"),
    "75009": ("75001", "75002", "75008", "75010", "75017", "75018"),
    "75010": ("75002", "75003", "75009", "75011", "75018", "75019"),
    "75011": ("75003", "75004", "75010", "75012", "75019", "75020"),
    "75012": ("75004", "75011", "75013", "75020", "vincennes", "saint-mande"),
    "75013": ("75005", "75012", "75014"),
    "75014": ("75005", "75006", "75013", "75015"),
    "75015": ("75006", "75007", "75014", "75016", "issy", "boulogne"),
    "75016": ("75007", "75008", "75015", "75017", "boulogne", "neuilly"),
    "75017": ("75008", "75009", "75016", "75018", "levallois", "clichy", "neuilly"),
    "75018": ("75009", "75010", "75017", "75019", "saint-denis", "clichy"),
    "75019": ("75010", "75011", "75018", "75020", "pantin"),
    "75020": ("75011", "75012", "75019", "montreuil"),
    # Banlieue
    "boulogne": ("75015", "75016", "issy"),
    "levallois": ("75017", "neuilly", "clichy"),
    "neuilly": ("75016", "75017", "levallois"),
    "issy": ("75015", "boulogne"),
    "vincennes": ("75012", "saint-mande", "montreuil"),
    "saint-mande": ("75012", "vincennes"),
    "montreuil": ("75020", "vincennes"),
    "saint-denis": ("75018", "pantin"),
    "pantin": ("75019", "saint-denis"),
    "clichy": ("75017", "75018", "levallois"),
}


class DistrictGraph:
    """Lookup over districts, zones and adjacency.

    Unknown ids never raise: they are simply not adjacent to anything and
    have no zone.

    Usage:
        graph = DistrictGraph(ALL_DISTRICTS, DISTRICT_ADJACENCY)
        graph.adjacent("75011", "75020")   # True
        graph.same_zone("75011", "75012")  # True
    """

    def __init__(
        self,
        districts: Iterable[District],
        adjacency: Mapping[str, Iterable[str]],
    ):
        self._districts: dict[str, District] = {d.id: d for d in districts}
        self._adjacency: dict[str, frozenset[str]] = {
            district_id: frozenset(neighbors) for district_id, neighbors in adjacency.items()
        }

    def get(self, district_id: str | None) -> District | None:
        if not district_id:
            return None
        return self._districts.get(district_id)

    def all(self) -> list[District]:
        return list(self._districts.values())

    def by_zone(self, zone: Zone | str) -> list[District]:
        return [d for d in self._districts.values() if d.zone == Zone(zone)]

    def zone_of(self, district_id: str | None) -> Zone | None:
        district = self.get(district_id)
        return district.zone if district else None

    def adjacent(self, a: str | None, b: str | None) -> bool:
        """Check adjacency in either authored direction."""
        if not a or not b:
            return False
        return b in self._adjacency.get(a, ()) or a in self._adjacency.get(b, ())

    def same_zone(self, a: str | None, b: str | None) -> bool:
        zone_a = self.zone_of(a)
        return zone_a is not None and zone_a == self.zone_of(b)

    def neighbors(self, district_id: str) -> set[str]:
        """All districts adjacent to `district_id`, symmetric closure applied."""
        result = set(self._adjacency.get(district_id, ()))
        for other, listed in self._adjacency.items():
            if district_id in listed:
                result.add(other)
        result.discard(district_id)
        return result

    def label(self, district_id: str, lang: str = "fr") -> str:
        """Display label for a district; unknown ids are returned unchanged."""
        district = self.get(district_id)
        if not district:
            return district_id
        return district.name_fr if lang == "fr" else district.name


ALL_DISTRICTS: tuple[District, ...] = PARIS_DISTRICTS + NEARBY_CITIES

DEFAULT_GRAPH = DistrictGraph(ALL_DISTRICTS, DISTRICT_ADJACENCY)
