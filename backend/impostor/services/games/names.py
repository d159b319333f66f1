import random

PREFIXES = ['El', 'La', 'Don', 'Doña', 'Tío', 'Tía', 'Che', 'San', 'Gringo']

NAMES = [
    'Tango', 'Mate', 'Gaucho', 'Pampa', 'Dulce', 'Fernet', 'Asado', 'Pelusa',
    'Messi', 'Diego', 'Evita', 'Gardel', 'Maradona', 'Birome', 'Colectivo',
    'Choripán', 'Alfajor', 'Chimichurri', 'Pato', 'Truco', 'Boliche',
    'Milonga', 'Quilmes', 'Malbec', 'Pibe', 'Flaco', 'Gordo', 'Rubio',
    'Petiso', 'Grandote', 'Loco', 'Capo', 'Cráneo',
]

SUFFIXES = [
    'Bailarín', 'Copero', 'Tanguero', 'Asador', 'Hincha', 'Piola', 'Criollo',
    'Porteño', 'Cordobés', 'Salteño', 'Tucumano', 'Chamigo', 'Pariente',
    'Vecino', 'Compadre', 'Amigo',
]


def generate_funny_name(rng=None):
    """Whimsical display name for players who leave theirs blank."""
    rng = rng or random
    name = rng.choice(NAMES)
    if rng.random() < 0.5:
        name = f"{rng.choice(PREFIXES)} {name}"
    if rng.random() < 0.5:
        name = f"{name} {rng.choice(SUFFIXES)}"
    return name


def display_name(name, rng=None):
    name = (name or '').strip()
    return name[:64] if name else generate_funny_name(rng)
