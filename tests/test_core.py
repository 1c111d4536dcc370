import logging
import unittest
from datetime import datetime
from io import BytesIO
from unittest.mock import MagicMock, patch

import httpx
import pandas as pd
from postgrest.exceptions import APIError

from siga.core import database, logger as siga_logger
from siga.core.errors import ErroGravacao, ErroLeituraArquivo
from siga.importacao import parser


class TestParserCSV(unittest.TestCase):

    def test_escolhe_ponto_e_virgula(self):
        linhas, separador = parser.analisar_csv("Nome;Matricula\nAna;100\nBia;200")
        self.assertEqual(separador, ';')
        self.assertEqual(linhas, [
            {'Nome': 'Ana', 'Matricula': '100'},
            {'Nome': 'Bia', 'Matricula': '200'},
        ])

    def test_escolhe_tab(self):
        linhas, separador = parser.analisar_csv("Nome\tNota\nAna\t7,5")
        self.assertEqual(separador, '\t')
        self.assertEqual(linhas[0]['Nota'], '7,5')

    def test_empate_fica_com_virgula(self):
        # Uma única coluna: todos os separadores produzem a mesma pontuação
        linhas, separador = parser.analisar_csv("Nome\nAna\nBia")
        self.assertEqual(separador, ',')
        self.assertEqual(len(linhas), 2)

    def test_remove_aspas_e_retorno_de_carro(self):
        linhas, _ = parser.analisar_csv('"Nome","Matricula"\r\n"Ana","100"\r\n')
        self.assertEqual(linhas, [{'Nome': 'Ana', 'Matricula': '100'}])

    def test_linha_curta_completa_com_vazio(self):
        linhas, _ = parser.analisar_csv("Nome,Matricula,Email\nAna,100")
        self.assertEqual(linhas[0]['Email'], '')

    def test_ignora_linhas_em_branco(self):
        linhas, _ = parser.analisar_csv("Nome,Matricula\nAna,100\n\n   \nBia,200")
        self.assertEqual([l['Nome'] for l in linhas], ['Ana', 'Bia'])

    def test_somente_cabecalho_gera_erro(self):
        with self.assertRaises(ErroLeituraArquivo) as ctx:
            parser.ler_planilha(b"Nome,Matricula\n", "alunos.csv")
        self.assertEqual(ctx.exception.mensagem, parser.MSG_ARQUIVO_VAZIO)

    def test_extensao_nao_suportada(self):
        with self.assertRaises(ErroLeituraArquivo):
            parser.ler_planilha(b"qualquer coisa", "notas.pdf")

    def test_decodifica_cp1252(self):
        conteudo = "Nome;Matrícula\nJoão;100".encode('cp1252')
        linhas = parser.ler_planilha(conteudo, "ALUNOS.CSV")
        self.assertEqual(linhas, [{'Nome': 'João', 'Matrícula': '100'}])

    def test_utf8_com_bom(self):
        conteudo = "Nome,Matricula\nAna,100".encode('utf-8-sig')
        linhas = parser.ler_planilha(conteudo, "alunos.csv")
        self.assertIn('Nome', linhas[0])


class TestParserExcel(unittest.TestCase):

    @patch('siga.importacao.parser.pd.read_excel')
    def test_le_primeira_aba_e_descarta_linhas_vazias(self, mock_read_excel):
        mock_read_excel.return_value = pd.DataFrame({
            ' Nome ': ['Ana', '', 'Bia'],
            'Matricula': ['100', '', '200'],
        })

        linhas = parser.ler_planilha(b'PK\x03\x04conteudo', 'alunos.xlsx')

        self.assertEqual(linhas, [
            {'Nome': 'Ana', 'Matricula': '100'},
            {'Nome': 'Bia', 'Matricula': '200'},
        ])
        _, kwargs = mock_read_excel.call_args
        self.assertEqual(kwargs['sheet_name'], 0)
        self.assertIs(kwargs['dtype'], str)

    def test_le_xlsx_real_como_texto(self):
        buffer = BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            pd.DataFrame({
                'Matricula': ['00100', '', 'NA'],
                'Disciplina': ['CALC1', '', 'FIS'],
                'Nota': [7.5, None, 9.0],
                'Data': [datetime(2024, 5, 20), None, datetime(2024, 6, 1)],
            }).to_excel(writer, sheet_name='Notas', index=False)
            pd.DataFrame({'Outra': ['ignorada']}).to_excel(writer, sheet_name='Extra', index=False)

        linhas = parser.ler_planilha(buffer.getvalue(), 'notas.xlsx')

        self.assertEqual(len(linhas), 2)
        self.assertEqual(list(linhas[0]), ['Matricula', 'Disciplina', 'Nota', 'Data'])
        # Zeros à esquerda e "NA" são preservados como texto
        self.assertEqual(linhas[0]['Matricula'], '00100')
        self.assertEqual(linhas[1]['Matricula'], 'NA')
        self.assertEqual(linhas[0]['Nota'], '7.5')
        self.assertTrue(linhas[0]['Data'].startswith('2024-05-20'))

    @patch('siga.importacao.parser.pd.read_excel')
    def test_planilha_vazia(self, mock_read_excel):
        mock_read_excel.return_value = pd.DataFrame()
        with self.assertRaises(ErroLeituraArquivo):
            parser.ler_planilha(b'PK\x03\x04', 'vazia.xlsx')

    @patch('siga.importacao.parser.pd.read_excel')
    def test_arquivo_corrompido(self, mock_read_excel):
        mock_read_excel.side_effect = ValueError("Excel file format cannot be determined")
        with self.assertRaises(ErroLeituraArquivo) as ctx:
            parser.ler_planilha(b'lixo', 'notas.xls')
        self.assertEqual(ctx.exception.mensagem, parser.MSG_ARQUIVO_INVALIDO)


class TestBancoDados(unittest.TestCase):

    def test_executar_converte_api_error(self):
        consulta = MagicMock()
        consulta.execute.side_effect = APIError({
            'message': 'duplicate key value violates unique constraint',
            'code': '23505', 'details': None, 'hint': None,
        })

        with self.assertRaises(ErroGravacao) as ctx:
            database.executar(consulta, 'inserir alunos')

        self.assertIn('Erro ao inserir alunos', ctx.exception.mensagem)
        self.assertIn('duplicate key', ctx.exception.mensagem)

    def test_executar_converte_falha_de_rede(self):
        consulta = MagicMock()
        consulta.execute.side_effect = httpx.ConnectError("connection refused")

        with self.assertRaises(ErroGravacao) as ctx:
            database.executar(consulta, 'carregar cursos')
        self.assertIn('falha de conexão', ctx.exception.mensagem)

    def test_executar_devolve_resposta(self):
        consulta = MagicMock()
        consulta.execute.return_value.data = [{'id': 1}]
        self.assertEqual(database.executar(consulta, 'carregar').data, [{'id': 1}])

    def test_fechar_encerra_sessao_e_bloqueia_acesso(self):
        cliente = MagicMock()
        banco = database.BancoDados(client=cliente)

        banco.fechar()

        cliente.auth.sign_out.assert_called_once()
        self.assertFalse(banco.aberto)
        with self.assertRaises(ConnectionError):
            banco.client

    def test_fechar_tolera_falha_no_sign_out(self):
        cliente = MagicMock()
        cliente.auth.sign_out.side_effect = RuntimeError("offline")
        banco = database.BancoDados(client=cliente)

        banco.fechar()
        banco.fechar()  # segunda chamada não faz nada

        self.assertFalse(banco.aberto)
        cliente.auth.sign_out.assert_called_once()

    @patch('siga.core.database.create_client')
    def test_init_app_cria_cliente_quando_nao_injetado(self, mock_create_client):
        app = MagicMock()
        app.config = {'SUPABASE_URL': 'https://x.supabase.co', 'SUPABASE_KEY': 'chave'}
        app.extensions = {}

        banco = database.BancoDados(app)

        mock_create_client.assert_called_once_with('https://x.supabase.co', 'chave')
        self.assertIs(app.extensions['supabase'], banco)


class TestLogger(unittest.TestCase):

    def test_nao_duplica_handlers(self):
        primeiro = siga_logger.get_logger('siga.teste.handlers')
        segundo = siga_logger.get_logger('siga.teste.handlers')
        self.assertIs(primeiro, segundo)
        self.assertEqual(len(segundo.handlers), 1)

    def test_configurar_nivel(self):
        log = siga_logger.get_logger('siga.teste.nivel')
        siga_logger.configurar_nivel('debug')
        self.assertEqual(log.level, logging.DEBUG)
        siga_logger.configurar_nivel('INFO')
        self.assertEqual(log.level, logging.INFO)


if __name__ == '__main__':
    unittest.main()
