from datetime import date

from flask_wtf import FlaskForm
from wtforms import IntegerField, SelectField, StringField
from wtforms.validators import DataRequired, Length, NumberRange, Optional


class DisciplinaForm(FlaskForm):
    name = StringField('Nome', validators=[
        DataRequired(message="Todos os campos são obrigatórios"),
        Length(max=150)
    ])
    code = StringField('Código', validators=[
        DataRequired(message="Todos os campos são obrigatórios"),
        Length(max=30)
    ])
    year = IntegerField('Ano', default=lambda: date.today().year, validators=[
        DataRequired(message="Todos os campos são obrigatórios"),
        NumberRange(min=1)
    ])
    semester = IntegerField('Semestre', validators=[
        DataRequired(message="Todos os campos são obrigatórios"),
        NumberRange(min=1, max=20)
    ])
    # Choices preenchidas na rota com os cursos do Supabase
    course_id = SelectField('Curso', validators=[Optional()])
