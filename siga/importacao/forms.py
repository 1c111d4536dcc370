from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField, FileRequired
from wtforms import BooleanField, SelectField

from siga.core.constants import TIPO_ALUNOS, TIPO_NOTAS


class UploadPlanilhaForm(FlaskForm):
    arquivo = FileField('Planilha', validators=[
        FileRequired(message="Nenhum arquivo enviado."),
        FileAllowed(['csv', 'xls', 'xlsx'], message="Suporte apenas para arquivos .xlsx, .xls e .csv")
    ])


class ForcarTipoForm(FlaskForm):
    tipo = SelectField('Tipo de dados', choices=[
        (TIPO_ALUNOS, 'Alunos'),
        (TIPO_NOTAS, 'Notas'),
    ])


class ConfirmarImportacaoForm(FlaskForm):
    # Comportamento da primeira versão da tela: cursos citados na planilha eram criados automaticamente
    criar_cursos = BooleanField('Criar cursos não encontrados')
