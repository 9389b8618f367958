import uuid
from datetime import datetime, timezone

from flask_login import UserMixin
from sqlalchemy.dialects.mysql import LONGTEXT
from werkzeug.security import generate_password_hash, check_password_hash

from extensions import db


USER_ROLES = ('admin', 'commercial')
VISIT_STATUSES = ('aceptado', 'rechazado', 'propuesta')
DOCUMENT_TYPES = ('pdf', 'img', 'doc', 'audio')


def generate_id():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(UserMixin, db.Model):
    """User model for authentication and authorization."""
    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    name = db.Column(db.String(128), nullable=False)
    role = db.Column(db.Enum(*USER_ROLES, name='user_role'), nullable=False, default='commercial')
    password_hash = db.Column(db.String(256))

    # Status
    is_active = db.Column(db.Boolean, default=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=utcnow)
    last_login = db.Column(db.DateTime, nullable=True)

    visits = db.relationship('Visit', back_populates='user', lazy=True)

    def __repr__(self):
        return f'<User {self.username}>'

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)


class Client(db.Model):
    """
    Negocio acumulado a partir de una o varias visitas.
    phones/emails/visit_ids se guardan como listas JSON; reasignar la lista
    completa al modificarlas para que SQLAlchemy detecte el cambio.
    """
    __tablename__ = 'clients'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    name = db.Column(db.String(255), nullable=False, index=True)
    address = db.Column(db.String(255), nullable=False)
    lat = db.Column(db.Float, nullable=False, default=0.0)
    lng = db.Column(db.Float, nullable=False, default=0.0)
    contact_name = db.Column(db.String(255), nullable=True)
    phones = db.Column(db.JSON, nullable=False, default=list)
    emails = db.Column(db.JSON, nullable=False, default=list)
    total_time_spent_minutes = db.Column(db.Integer, nullable=False, default=0)
    visit_ids = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    contacts = db.relationship('Contact', back_populates='client', cascade='all, delete-orphan',
                               order_by='Contact.created_at')
    visits = db.relationship('Visit', back_populates='client', lazy=True)
    expenses = db.relationship('Expense', back_populates='client', lazy=True,
                               order_by='Expense.date.desc()')
    documents = db.relationship('Document', back_populates='client', lazy=True,
                                order_by='Document.date.desc()')

    def __repr__(self):
        return f'<Client {self.name}>'

    @property
    def general_expenses(self):
        """Expenses logged directly on the client, not through a visit."""
        return [e for e in self.expenses if e.visit_id is None]

    @property
    def general_documents(self):
        return [d for d in self.documents if d.visit_id is None]


class Contact(db.Model):
    __tablename__ = 'contacts'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    client_id = db.Column(db.String(36), db.ForeignKey('clients.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(64), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    client = db.relationship('Client', back_populates='contacts')

    def __repr__(self):
        return f'<Contact {self.name} ({self.role})>'


class Visit(db.Model):
    """
    Visita comercial registrada por un agente.
    El estado se fija al crearla y no cambia después.
    """
    __tablename__ = 'visits'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    client_id = db.Column(db.String(36), db.ForeignKey('clients.id'), nullable=True, index=True)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True, index=True)
    place_id = db.Column(db.String(255), nullable=False)
    place_name = db.Column(db.String(255), nullable=False)
    place_address = db.Column(db.String(255), nullable=False)
    timestamp = db.Column(db.BigInteger, nullable=False, index=True)  # epoch ms
    feedback = db.Column(db.Text, nullable=False, default='')
    status = db.Column(db.Enum(*VISIT_STATUSES, name='visit_status'), nullable=False)
    tags = db.Column(db.JSON, nullable=False, default=list)
    lat = db.Column(db.Float, nullable=False, default=0.0)
    lng = db.Column(db.Float, nullable=False, default=0.0)
    duration_minutes = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=utcnow)

    client = db.relationship('Client', back_populates='visits')
    user = db.relationship('User', back_populates='visits')
    expenses = db.relationship('Expense', back_populates='visit', lazy=True,
                               cascade='all, delete-orphan')
    documents = db.relationship('Document', back_populates='visit', lazy=True,
                                cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Visit {self.place_name} - {self.status}>'


class Expense(db.Model):
    __tablename__ = 'expenses'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    client_id = db.Column(db.String(36), db.ForeignKey('clients.id'), nullable=True, index=True)
    visit_id = db.Column(db.String(36), db.ForeignKey('visits.id'), nullable=True, index=True)
    amount = db.Column(db.Float, nullable=False)
    concept = db.Column(db.String(255), nullable=False)
    date = db.Column(db.BigInteger, nullable=False)  # epoch ms

    client = db.relationship('Client', back_populates='expenses')
    visit = db.relationship('Visit', back_populates='expenses')

    def __repr__(self):
        return f'<Expense {self.concept} {self.amount}>'


class Document(db.Model):
    """Documento adjunto (pdf, imagen, doc) o nota de voz (audio) en base64."""
    __tablename__ = 'documents'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    client_id = db.Column(db.String(36), db.ForeignKey('clients.id'), nullable=True, index=True)
    visit_id = db.Column(db.String(36), db.ForeignKey('visits.id'), nullable=True, index=True)
    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.Enum(*DOCUMENT_TYPES, name='document_type'), nullable=False)
    date = db.Column(db.BigInteger, nullable=False)  # epoch ms
    data = db.Column(db.Text().with_variant(LONGTEXT(), 'mysql'), nullable=True)

    client = db.relationship('Client', back_populates='documents')
    visit = db.relationship('Visit', back_populates='documents')

    def __repr__(self):
        return f'<Document {self.name} ({self.type})>'
