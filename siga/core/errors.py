"""
Hierarquia de Erros do SIGA.

As rotas capturam ErroSiga e exibem a mensagem ao usuário via flash.
Avisos por registro (referência não encontrada) NÃO são exceções: são
acumulados no resumo da importação.
"""


class ErroSiga(Exception):
    """Erro base da aplicação. A mensagem é sempre apresentável ao usuário."""

    def __init__(self, mensagem: str):
        super().__init__(mensagem)
        self.mensagem = mensagem


class ErroLeituraArquivo(ErroSiga):
    """Planilha ilegível, formato não suportado ou sem linhas de dados."""


class TipoNaoReconhecido(ErroSiga):
    """As colunas não permitem classificar a planilha (alunos ou notas)."""

    def __init__(self, mensagem: str, colunas=None):
        super().__init__(mensagem)
        self.colunas = list(colunas or [])


class NenhumRegistroValido(ErroSiga):
    """Após a normalização, nenhuma linha possui os campos obrigatórios."""

    def __init__(self, mensagem: str, descartados: int = 0):
        super().__init__(mensagem)
        self.descartados = descartados


class ErroGravacao(ErroSiga):
    """Falha do Supabase em um insert/update/delete. A mensagem original é preservada."""


class ErroTransicao(ErroSiga):
    """Operação inválida para o estado atual da sessão de importação."""
