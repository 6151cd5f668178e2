# fitcoach/forms/auth_forms.py

from flask_wtf import FlaskForm
from wtforms import PasswordField, StringField, SubmitField
from wtforms.validators import DataRequired, Email, Length, Optional


class LoginForm(FlaskForm):
    email = StringField(
        'Email',
        validators=[DataRequired(message="El email es obligatorio"), Email(message="Email inválido")]
    )
    password = PasswordField(
        'Contraseña',
        validators=[DataRequired(message="La contraseña es obligatoria")]
    )
    submit = SubmitField('Iniciar sesión')


class RegisterForm(FlaskForm):
    email = StringField(
        'Email',
        validators=[DataRequired(message="El email es obligatorio"), Email(message="Email inválido")]
    )
    password = PasswordField(
        'Contraseña',
        validators=[
            DataRequired(message="La contraseña es obligatoria"),
            Length(min=8, message="Mínimo 8 caracteres"),
        ]
    )
    firstName = StringField('Nombre', validators=[Optional(), Length(max=80)])
    lastName = StringField('Apellidos', validators=[Optional(), Length(max=80)])
    submit = SubmitField('Crear cuenta')
