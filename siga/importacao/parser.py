"""
Módulo de Leitura de Planilhas

Responsável por:
1. Ler arquivos CSV testando os separadores (vírgula, ponto e vírgula, tab)
   e escolhendo o que produz mais células preenchidas.
2. Ler arquivos Excel (.xlsx/.xls) via pandas, usando a primeira aba.

O resultado é sempre uma lista de dicionários {cabeçalho: valor} na ordem
original das linhas.
"""

import os
from io import BytesIO
from typing import Dict, List, Tuple

import pandas as pd

from siga.core.constants import EXTENSOES_PLANILHA, SEPARADORES_CSV
from siga.core.errors import ErroLeituraArquivo
from siga.core.logger import get_logger

logger = get_logger(__name__)

ENCODINGS_CSV = ('utf-8-sig', 'cp1252', 'latin-1')

MSG_ARQUIVO_VAZIO = "Arquivo vazio ou sem dados válidos"
MSG_ARQUIVO_INVALIDO = "Não foi possível processar o arquivo. Verifique se ele está no formato correto"


def extensao_arquivo(nome_arquivo: str) -> str:
    _, ext = os.path.splitext(nome_arquivo or '')
    return ext.lower()


def _limpar_celula(valor: str) -> str:
    return valor.strip().replace('"', '').replace('\r', '')


def _contar_preenchidas(linhas: List[Dict[str, str]]) -> int:
    return sum(
        1
        for linha in linhas
        for valor in linha.values()
        if valor and str(valor).strip()
    )


def _decodificar(conteudo: bytes) -> str:
    for encoding in ENCODINGS_CSV:
        try:
            return conteudo.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise ErroLeituraArquivo(f"{MSG_ARQUIVO_INVALIDO} (codificação desconhecida).")


def _separar(texto: str, separador: str) -> List[Dict[str, str]]:
    linhas_texto = texto.strip().split('\n')
    if len(linhas_texto) < 2:
        return []

    cabecalhos = [_limpar_celula(h) for h in linhas_texto[0].split(separador)]
    linhas = []
    for linha_texto in linhas_texto[1:]:
        if not linha_texto.strip():
            continue
        valores = [_limpar_celula(v) for v in linha_texto.split(separador)]
        linha = {}
        for indice, cabecalho in enumerate(cabecalhos):
            linha[cabecalho] = valores[indice] if indice < len(valores) else ''
        linhas.append(linha)
    return linhas


def analisar_csv(texto: str) -> Tuple[List[Dict[str, str]], str]:
    """
    Testa cada separador candidato e devolve (linhas, separador) do que gerou
    mais células não vazias. Empates ficam com o primeiro separador testado.
    """
    melhor_resultado: List[Dict[str, str]] = []
    melhor_separador = SEPARADORES_CSV[0]
    melhor_pontuacao = 0

    for separador in SEPARADORES_CSV:
        linhas = _separar(texto, separador)
        pontuacao = _contar_preenchidas(linhas)
        if pontuacao > melhor_pontuacao:
            melhor_resultado = linhas
            melhor_separador = separador
            melhor_pontuacao = pontuacao

    return melhor_resultado, melhor_separador


def _ler_excel(conteudo: bytes) -> List[Dict[str, str]]:
    try:
        df = pd.read_excel(BytesIO(conteudo), sheet_name=0, dtype=str, keep_default_na=False)
    except Exception as e:
        logger.error(f"Erro ao ler planilha Excel: {e}", exc_info=True)
        raise ErroLeituraArquivo(MSG_ARQUIVO_INVALIDO) from e

    if df.empty:
        return []

    df.columns = [str(coluna).strip() for coluna in df.columns]
    # Remove linhas completamente vazias
    df = df[df.apply(lambda linha: any(str(v).strip() for v in linha), axis=1)]
    return df.to_dict(orient='records')


def ler_planilha(conteudo: bytes, nome_arquivo: str) -> List[Dict[str, str]]:
    """
    Lê o arquivo enviado e devolve as linhas como dicionários.

    Raises:
        ErroLeituraArquivo: extensão não suportada, conteúdo ilegível ou sem linhas.
    """
    ext = extensao_arquivo(nome_arquivo)
    if ext not in EXTENSOES_PLANILHA:
        raise ErroLeituraArquivo("Formato de arquivo não suportado. Use .xlsx, .xls ou .csv")

    if ext == '.csv':
        linhas, separador = analisar_csv(_decodificar(conteudo))
        logger.info(f"CSV '{nome_arquivo}' lido com separador {separador!r}: {len(linhas)} linhas")
    else:
        linhas = _ler_excel(conteudo)
        logger.info(f"Excel '{nome_arquivo}' lido: {len(linhas)} linhas")

    if not linhas:
        raise ErroLeituraArquivo(MSG_ARQUIVO_VAZIO)

    return linhas
