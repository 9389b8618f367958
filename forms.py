"""
Flask-WTF Forms
Validation for the flat JSON payloads of the API.

The app authenticates with bearer tokens, so CSRF is disabled on every form.
Nested payloads (visits with attachments) are validated in services.
"""

from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import (
    StringField, PasswordField, FloatField, IntegerField, SelectField
)
from wtforms.validators import (
    DataRequired, InputRequired, Email, Length, Optional, NumberRange
)

from models import USER_ROLES, DOCUMENT_TYPES


def form_from_json(form_class, payload):
    """
    Build a form from a JSON object.

    Scalar values are passed as strings so WTForms coerces them the same way
    it does for submitted form data; nulls, lists and objects are skipped.
    """
    formdata = MultiDict()
    for key, value in (payload or {}).items():
        if value is None or isinstance(value, (list, dict)):
            continue
        formdata.add(key, value if isinstance(value, str) else str(value))
    return form_class(formdata)


def form_errors(form):
    """Flatten WTForms errors into {field: first message}."""
    return {field: messages[0] for field, messages in form.errors.items() if messages}


class ApiForm(FlaskForm):
    class Meta:
        csrf = False


# Authentication Forms
class LoginForm(ApiForm):
    username = StringField('Usuario', validators=[
        DataRequired(message='El usuario es requerido'),
        Length(max=64)
    ])
    password = PasswordField('Contraseña', validators=[
        DataRequired(message='La contraseña es requerida')
    ])


class UserForm(ApiForm):
    """Alta de usuarios desde el panel directivo"""
    username = StringField('Usuario', validators=[
        DataRequired(message='El usuario es requerido'),
        Length(min=3, max=64, message='El usuario debe tener entre 3 y 64 caracteres')
    ])
    name = StringField('Nombre', validators=[
        DataRequired(message='El nombre es requerido'),
        Length(max=128)
    ])
    password = PasswordField('Contraseña', validators=[
        DataRequired(message='La contraseña es requerida'),
        Length(min=8, message='La contraseña debe tener al menos 8 caracteres')
    ])
    role = SelectField('Rol', choices=[(role, role) for role in USER_ROLES],
                       default='commercial',
                       validators=[Optional()])


# Client folder forms
class ContactForm(ApiForm):
    name = StringField('Nombre', validators=[
        DataRequired(message='El nombre es requerido'),
        Length(max=255)
    ])
    role = StringField('Cargo', validators=[
        DataRequired(message='El cargo es requerido'),
        Length(max=255)
    ])
    phone = StringField('Teléfono', validators=[Optional(), Length(max=64)])
    email = StringField('Email', validators=[
        Optional(),
        Email(message='Email inválido'),
        Length(max=255)
    ])


class ExpenseForm(ApiForm):
    amount = FloatField('Importe', validators=[
        InputRequired(message='El importe es requerido'),
        NumberRange(min=0, message='El importe no puede ser negativo')
    ])
    concept = StringField('Concepto', validators=[
        DataRequired(message='El concepto es requerido'),
        Length(max=255)
    ])
    date = IntegerField('Fecha', validators=[Optional()])


class DocumentForm(ApiForm):
    name = StringField('Nombre', validators=[
        DataRequired(message='El nombre es requerido'),
        Length(max=255)
    ])
    type = SelectField('Tipo', choices=[(t, t) for t in DOCUMENT_TYPES])
    date = IntegerField('Fecha', validators=[Optional()])
