"""
Script para poblar la base de datos con datos de demostración.
Clientes y visitas de ejemplo en Madrid, registrados con el mismo flujo de check-in que usa la app.
Ejecutar con: python seed_data.py o flask seed-demo
"""
from datetime import timedelta

from utils.timezone_helper import now_local

DEMO_VISITS = [
    {
        'placeName': 'Restaurante El Olivo',
        'placeAddress': 'Calle de Alcalá 45, Madrid',
        'location': {'lat': 40.4192, 'lng': -3.6967},
        'status': 'aceptado',
        'feedback': 'Muy interesados en el sistema de reservas, firman la propuesta esta semana.',
        'tags': ['Interesado', 'Cierre'],
        'durationMinutes': 45,
        'days_ago': 12,
        'client': {'contactName': 'Lucía Martín', 'phones': ['+34 600 111 222'],
                   'emails': ['lucia@elolivo.es']},
        'expensesAdded': [{'amount': 18.5, 'concept': 'Parking'}],
    },
    {
        'placeName': 'Taberna La Bodeguilla',
        'placeAddress': 'Calle del Prado 12, Madrid',
        'location': {'lat': 40.4146, 'lng': -3.6985},
        'status': 'propuesta',
        'feedback': 'Piden una demo con el encargado de sala antes de decidir.',
        'tags': ['Seguimiento'],
        'durationMinutes': 30,
        'days_ago': 8,
        'client': {'contactName': 'Andrés Gil', 'phones': ['+34 600 333 444']},
    },
    {
        'placeName': 'Café Central',
        'placeAddress': 'Plaza del Ángel 10, Madrid',
        'location': {'lat': 40.4145, 'lng': -3.7006},
        'status': 'rechazado',
        'feedback': 'Ya trabajan con otro proveedor y tienen contrato hasta el año que viene.',
        'tags': ['Competencia'],
        'durationMinutes': 15,
        'days_ago': 5,
        'client': {},
    },
    {
        'placeName': 'Taberna La Bodeguilla',
        'placeAddress': 'Calle del Prado 12, Madrid',
        'location': {'lat': 40.4146, 'lng': -3.6985},
        'status': 'aceptado',
        'feedback': 'Demo realizada, aceptan el plan anual.',
        'tags': ['Cierre'],
        'durationMinutes': 40,
        'days_ago': 1,
        'client': {'emails': ['reservas@labodeguilla.es']},
        'expensesAdded': [{'amount': 12.0, 'concept': 'Comida con cliente'}],
    },
]


def seed_database(user=None):
    """
    Carga las visitas de demostración.

    Returns:
        tuple: (clientes en la base de datos, visitas creadas)
    """
    from models import Client, User
    from services.visit_service import record_visit

    if user is None:
        user = User.query.filter_by(role='commercial').first()

    now = now_local()
    created = 0
    for demo in DEMO_VISITS:
        report = {k: v for k, v in demo.items() if k not in ('days_ago', 'client')}
        timestamp = now - timedelta(days=demo['days_ago'])
        report['timestamp'] = int(timestamp.timestamp() * 1000)
        report['placeId'] = f"demo-{report['placeName'].lower().replace(' ', '-')}"
        record_visit(report, demo['client'], user=user)
        created += 1

    return Client.query.count(), created


if __name__ == '__main__':
    from app import create_app
    from cli import seed_default_users

    app = create_app()
    with app.app_context():
        from extensions import db
        db.create_all()
        seed_default_users()
        clients, visits = seed_database()
        print(f"✓ {clients} clientes y {visits} visitas de demostración")
