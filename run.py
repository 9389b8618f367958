"""
Punto de entrada de OneReserve Comercial para desarrollo
"""
import os

from app import create_app
from config import config
from extensions import db
from models import User, Client, Contact, Visit, Expense, Document

# Crear aplicación
app = create_app(config.get(os.getenv('FLASK_ENV') or 'default', config['default']))


@app.shell_context_processor
def make_shell_context():
    """
    Hace que estos objetos estén disponibles automáticamente
    en el shell de Flask (flask shell)
    """
    return {
        'db': db,
        'User': User,
        'Client': Client,
        'Contact': Contact,
        'Visit': Visit,
        'Expense': Expense,
        'Document': Document,
    }


if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=int(os.getenv('PORT', 5000)))
