from flask_wtf import FlaskForm
from wtforms import HiddenField, PasswordField, StringField
from wtforms.validators import DataRequired, EqualTo, Length, Regexp, ValidationError

from .services import validar_senha

EMAIL_REGEX = r'^[^@\s]+@[^@\s]+\.[^@\s]+$'


class LoginForm(FlaskForm):
    email = StringField('E-mail', validators=[
        DataRequired(message="E-mail é obrigatório"),
        Regexp(EMAIL_REGEX, message="E-mail inválido")
    ])
    senha = PasswordField('Senha', validators=[DataRequired(message="Senha é obrigatória")])


class EsqueciSenhaForm(FlaskForm):
    email = StringField('E-mail', validators=[
        DataRequired(message="E-mail é obrigatório"),
        Regexp(EMAIL_REGEX, message="E-mail inválido")
    ])


class RedefinirSenhaForm(FlaskForm):
    token_hash = HiddenField(validators=[DataRequired(message="Link inválido ou expirado")])
    senha = PasswordField('Nova senha', validators=[
        DataRequired(message="Por favor, preencha todos os campos"),
        Length(max=72)
    ])
    confirmacao = PasswordField('Confirmar senha', validators=[
        DataRequired(message="Por favor, preencha todos os campos"),
        EqualTo('senha', message="As senhas não coincidem")
    ])

    def validate_senha(self, field):
        erros = validar_senha(field.data)
        if erros:
            raise ValidationError('. '.join(erros))
