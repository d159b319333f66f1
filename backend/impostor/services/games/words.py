import random

DEFAULT_WORD = 'Mate'

WORD_BANK = [
    # Places and geography
    'Pampa', 'Patagonia', 'Andes', 'Iguazú', 'Aconcagua', 'Glaciar', 'Puna',
    'Quebrada', 'Estancia', 'Rancho',
    # Food
    'Asado', 'Mate', 'Empanada', 'Chimichurri', 'Choripán', 'Dulce de leche',
    'Alfajor', 'Locro', 'Milanesa', 'Provoleta', 'Facturas', 'Medialunas',
    'Churros', 'Fernet', 'Malbec',
    # Folklore and traditions
    'Gaucho', 'Boleadoras', 'Facón', 'Rastra', 'Bombacha', 'Alpargatas',
    'Poncho', 'Boina', 'Chamame', 'Zamba', 'Chacarera', 'Malambo', 'Tango',
    'Milonga', 'Payador', 'Guitarra', 'Bombo', 'Bandoneón',
    # Animals
    'Ñandú', 'Guanaco', 'Vicuña', 'Puma', 'Yacaré', 'Carpincho', 'Hornero',
    'Cóndor', 'Chinchilla', 'Vizcacha', 'Tucán', 'Pingüino', 'Ballena',
    'Lobo marino',
    # Plants
    'Ombú', 'Ceibo', 'Quebracho', 'Algarrobo', 'Yerba', 'Cactus', 'Cardón',
    # People and culture
    'Martín Fierro', 'Evita', 'Maradona', 'Gardel', 'Borges', 'Cortázar',
    'Che Guevara', 'San Martín',
    # Sports
    'Polo', 'Pato', 'Truco', 'Pelota', 'Bochas',
    # Everyday objects
    'Birome', 'Calefón', 'Colectivo', 'Baldosa', 'Banderín',
    # Customs
    'Fiesta', 'Peña', 'Siesta', 'Sobremesa', 'Pulpería', 'Almacén',
    'Conventillo',
    # Nature
    'Pampeano', 'Serrano', 'Cordillera', 'Litoral', 'Laguna', 'Río', 'Delta',
    'Salinas',
    # Mythology
    'Pachamama', 'Coquena', 'Zupay', 'Kakuy', 'Añá', 'Luz mala', 'Lobizón',
    'Pombero', 'Yasí Yateré', 'Curupí',
    # Dances
    'Gato', 'Escondido', 'Carnavalito', 'Huayno', 'Cueca',
    # Instruments
    'Charango', 'Erke', 'Siku', 'Quena', 'Caja',
    # Regional dishes
    'Humita', 'Tamales', 'Carbonada', 'Cazuela', 'Puchero', 'Mondongo',
    'Choclo', 'Quinoa',
    # Drinks
    'Vino', 'Torrontés', 'Quilmes', 'Mosto', 'Aloja',
    # Textiles
    'Telar', 'Aguayo', 'Mantilla', 'Vincha',
    # Rural work
    'Tropero', 'Arriero', 'Domador', 'Carrero', 'Chasqui',
    # Architecture
    'Adobe', 'Quincho', 'Galería', 'Alero',
]


def random_word(rng=None, words=None):
    """Return one word, uniformly, from ``words`` (defaults to WORD_BANK)."""
    rng = rng or random
    pool = WORD_BANK if words is None else words
    if not pool:
        return DEFAULT_WORD
    return rng.choice(pool) or DEFAULT_WORD
