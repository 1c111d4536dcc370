"""
Rotas do Módulo de Importação

Fluxo: upload -> detecção do tipo (com opção de forçar) -> confirmação -> resumo.
"""

from flask import (
    current_app,
    flash,
    redirect,
    render_template,
    session,
    url_for,
)

from . import importacao_bp
from .forms import ConfirmarImportacaoForm, ForcarTipoForm, UploadPlanilhaForm
from .parser import extensao_arquivo
from .sessao import Estado
from siga.auth.services import exigir_login, professor_atual
from siga.core.constants import MIME_GENERICO, MIME_PLANILHA, ROTULOS_TIPO, TIPO_ALUNOS
from siga.core.database import get_db
from siga.core.errors import ErroSiga, NenhumRegistroValido, TipoNaoReconhecido
from siga.core.logger import get_logger

logger = get_logger(__name__)

CHAVE_SESSAO = 'importacao_id'
LINHAS_PREVIA = 10

# Assinaturas binárias dos formatos Excel
ASSINATURA_XLSX = b'PK\x03\x04'
ASSINATURA_XLS = b'\xd0\xcf\x11\xe0'


# === FUNÇÕES AUXILIARES ===

def _repositorio():
    return current_app.extensions['importacao_sessoes']


def _sessao_atual():
    return _repositorio().obter(session.get(CHAVE_SESSAO), professor_atual())


def _mime_aceito(arquivo) -> bool:
    mime = arquivo.mimetype or MIME_GENERICO
    return mime in MIME_PLANILHA.get(extensao_arquivo(arquivo.filename), ())


def _conteudo_valido(conteudo: bytes, nome_arquivo: str) -> bool:
    ext = extensao_arquivo(nome_arquivo)
    if ext == '.xlsx':
        return conteudo.startswith(ASSINATURA_XLSX)
    if ext == '.xls':
        return conteudo.startswith(ASSINATURA_XLS)
    return True


@importacao_bp.before_request
def restringir_acesso():
    return exigir_login()


# === ROTAS ===

@importacao_bp.route('/')
def upload_form():
    sessao = _sessao_atual()
    previa = sessao.linhas[:LINHAS_PREVIA] if sessao else []
    return render_template(
        'importacao/upload.html',
        form=UploadPlanilhaForm(),
        form_tipo=ForcarTipoForm(),
        form_confirmar=ConfirmarImportacaoForm(),
        sessao=sessao,
        previa=previa,
        rotulos=ROTULOS_TIPO,
        Estado=Estado,
        TIPO_ALUNOS=TIPO_ALUNOS,
    )


@importacao_bp.route('/upload', methods=['POST'])
def upload_arquivo():
    form = UploadPlanilhaForm()
    if not form.validate_on_submit():
        for erros in form.errors.values():
            for erro in erros:
                flash(erro, 'error')
        return redirect(url_for('importacao_bp.upload_form'))

    arquivo = form.arquivo.data
    if not _mime_aceito(arquivo):
        logger.warning(f"Upload rejeitado (tipo MIME {arquivo.mimetype}): {arquivo.filename}")
        flash("Tipo de arquivo não suportado. Envie uma planilha .xlsx, .xls ou .csv.", 'error')
        return redirect(url_for('importacao_bp.upload_form'))

    conteudo = arquivo.read()

    # Validação de Magic Numbers (Segurança)
    if not _conteudo_valido(conteudo, arquivo.filename):
        logger.warning(f"Upload rejeitado (assinatura inválida): {arquivo.filename}")
        flash("Arquivo inválido (conteúdo não corresponde à extensão).", 'error')
        return redirect(url_for('importacao_bp.upload_form'))

    sessao = _repositorio().nova(professor_atual())
    session[CHAVE_SESSAO] = sessao.id

    try:
        deteccao = sessao.carregar(conteudo, arquivo.filename)
    except ErroSiga as e:
        flash(f"Erro ao processar planilha: {e.mensagem}", 'error')
        return redirect(url_for('importacao_bp.upload_form'))

    flash(f"Planilha carregada: {len(sessao.linhas)} registros encontrados", 'success')
    if not deteccao.reconhecido:
        flash("Formato não reconhecido automaticamente. Verifique as colunas ou force o tipo de dados.", 'error')

    return redirect(url_for('importacao_bp.upload_form'))


@importacao_bp.route('/forcar-tipo', methods=['POST'])
def forcar_tipo():
    sessao = _sessao_atual()
    form = ForcarTipoForm()
    if sessao is None or not form.validate_on_submit():
        flash("Nenhuma planilha carregada.", 'error')
        return redirect(url_for('importacao_bp.upload_form'))

    try:
        sessao.forcar_tipo(form.tipo.data)
    except ErroSiga as e:
        flash(e.mensagem, 'error')
        return redirect(url_for('importacao_bp.upload_form'))

    flash(f"Tipo definido como {ROTULOS_TIPO[sessao.tipo].title()}. "
          "Verifique se os dados estão corretos antes de salvar.", 'success')
    return redirect(url_for('importacao_bp.upload_form'))


@importacao_bp.route('/confirmar', methods=['POST'])
def confirmar():
    sessao = _sessao_atual()
    form = ConfirmarImportacaoForm()
    if sessao is None or not form.validate_on_submit():
        flash("Nenhuma planilha carregada.", 'error')
        return redirect(url_for('importacao_bp.upload_form'))

    rotulo = 'alunos' if sessao.tipo == TIPO_ALUNOS else 'notas'
    try:
        resumo = sessao.gravar(get_db(), criar_cursos=form.criar_cursos.data)
    except (TipoNaoReconhecido, NenhumRegistroValido) as e:
        flash(e.mensagem, 'error')
        return redirect(url_for('importacao_bp.upload_form'))
    except ErroSiga as e:
        flash(f"Erro ao importar {rotulo}: {e.mensagem}", 'error')
        return redirect(url_for('importacao_bp.upload_form'))

    _repositorio().descartar(sessao.id)
    session.pop(CHAVE_SESSAO, None)

    flash(f"{rotulo.title()} importados: {resumo.inseridos} adicionados, {resumo.atualizados} atualizados", 'success')
    return render_template('importacao/resultado.html', resumo=resumo, rotulo=rotulo,
                           nome_arquivo=sessao.nome_arquivo)


@importacao_bp.route('/cancelar', methods=['POST'])
def cancelar():
    sessao = _sessao_atual()
    if sessao is not None:
        sessao.cancelar()
        _repositorio().descartar(sessao.id)
    session.pop(CHAVE_SESSAO, None)
    return redirect(url_for('importacao_bp.upload_form'))
