from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField, FileRequired
from wtforms import DateField, IntegerField, SelectField, StringField
from wtforms.validators import DataRequired, Length, NumberRange, Optional


class CursoForm(FlaskForm):
    name = StringField('Nome', validators=[
        DataRequired(message="Nome do curso é obrigatório"),
        Length(max=150)
    ])
    code = StringField('Código', validators=[Optional(), Length(max=30)])
    total_semesters = IntegerField('Total de semestres', default=8, validators=[
        Optional(),
        NumberRange(min=1, max=20, message="Entre 1 e 20 semestres")
    ])
    start_date = DateField('Data de início', validators=[Optional()])


class VincularDisciplinaForm(FlaskForm):
    subject_id = SelectField('Disciplina', validators=[DataRequired(message="Selecione uma disciplina")])


class NovaDisciplinaCursoForm(FlaskForm):
    name = StringField('Nome', validators=[DataRequired(message="Preencha todos os campos obrigatórios")])
    code = StringField('Código', validators=[DataRequired(message="Preencha todos os campos obrigatórios")])
    year = IntegerField('Ano', default=1, validators=[DataRequired(), NumberRange(min=1)])
    semester = IntegerField('Semestre', default=1, validators=[DataRequired(), NumberRange(min=1, max=20)])
    professor_db_id = SelectField('Professor', validators=[Optional()])


class ImportarCursosForm(FlaskForm):
    arquivo = FileField('Planilha', validators=[
        FileRequired(message="Nenhum arquivo enviado."),
        FileAllowed(['csv', 'xls', 'xlsx'], message="Suporte apenas para arquivos .xlsx, .xls e .csv")
    ])
