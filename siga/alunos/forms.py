from datetime import date

from flask_wtf import FlaskForm
from wtforms import DateField, SelectField, StringField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional, Regexp

from siga.importacao.normalizador import converter_decimal


class DecimalBRField(StringField):
    """Campo numérico que aceita vírgula ou ponto como separador decimal."""

    def process_formdata(self, valuelist):
        if valuelist and valuelist[0].strip():
            self.data = converter_decimal(valuelist[0], None)
            if self.data is None:
                raise ValueError(self.gettext('Número inválido'))
        else:
            self.data = None

    def _value(self):
        return '' if self.data is None else str(self.data)


class AlunoForm(FlaskForm):
    name = StringField('Nome', validators=[
        DataRequired(message="Nome, matrícula e curso são obrigatórios"),
        Length(max=150)
    ])
    student_id = StringField('Matrícula', validators=[
        DataRequired(message="Nome, matrícula e curso são obrigatórios"),
        Length(max=50)
    ])
    email = StringField('E-mail', validators=[
        Optional(),
        Regexp(r'^[^@\s]+@[^@\s]+\.[^@\s]+$', message="E-mail inválido")
    ])
    course_id = SelectField('Curso', validators=[DataRequired(message="Nome, matrícula e curso são obrigatórios")])
    sexo = StringField('Sexo', validators=[Optional(), Length(max=30)])
    renda_media = DecimalBRField('Renda média', validators=[Optional(), NumberRange(min=0)])
    raca = StringField('Raça/Cor', validators=[Optional(), Length(max=50)])


class NotaForm(FlaskForm):
    subject_id = SelectField('Disciplina', validators=[DataRequired(message="Preencha todos os campos obrigatórios")])
    assessment_type = StringField('Tipo de avaliação', validators=[
        DataRequired(message="Preencha todos os campos obrigatórios")
    ])
    assessment_name = StringField('Avaliação', validators=[
        DataRequired(message="Preencha todos os campos obrigatórios")
    ])
    grade = DecimalBRField('Nota', validators=[
        InputRequired(message="Preencha todos os campos obrigatórios"),
        NumberRange(min=0)
    ])
    max_grade = DecimalBRField('Nota máxima', default=10.0, validators=[Optional(), NumberRange(min=0)])
    date_assigned = DateField('Data', default=date.today, validators=[Optional()])
