import unittest
from datetime import date
from types import SimpleNamespace
from unittest.mock import MagicMock

from supabase import AuthError

from siga.alunos import services as alunos_services
from siga.auth import services as auth_services
from siga.core.errors import NenhumRegistroValido
from siga.cursos import services as cursos_services
from siga.dashboard import services as dashboard_services
from siga.disciplinas import services as disciplinas_services
from supabase_falso import SupabaseFalso

PROFESSOR = 'prof-1'


class TestCursosServices(unittest.TestCase):

    def test_semestre_atual(self):
        inicio = date(2024, 2, 1)
        self.assertEqual(cursos_services.calcular_semestre_atual(inicio, 8, hoje=date(2024, 2, 20)), 1)
        self.assertEqual(cursos_services.calcular_semestre_atual(inicio, 8, hoje=date(2024, 8, 1)), 2)
        self.assertEqual(cursos_services.calcular_semestre_atual('2024-02-01', 8, hoje=date(2025, 3, 1)), 3)

    def test_semestre_atual_limites(self):
        self.assertEqual(cursos_services.calcular_semestre_atual(date(2010, 1, 1), 8, hoje=date(2024, 1, 1)), 8)
        self.assertEqual(cursos_services.calcular_semestre_atual(date(2030, 1, 1), 8, hoje=date(2024, 1, 1)), 1)
        self.assertEqual(cursos_services.calcular_semestre_atual(None, 8), 1)

    def test_agrupar_por_semestre(self):
        disciplinas = [{'id': 's1', 'semester': 1}, {'id': 's2', 'semester': 3}, {'id': 's3', 'semester': 1}]
        grupos = cursos_services.agrupar_por_semestre(disciplinas, 3)
        self.assertEqual([s for s, _ in grupos], [1, 2, 3])
        self.assertEqual([d['id'] for d in grupos[0][1]], ['s1', 's3'])
        self.assertEqual(grupos[1][1], [])

    def test_importar_cursos(self):
        db = SupabaseFalso(courses=[{'id': 'c1', 'name': 'Engenharia'}])
        linhas = [{'Nome': 'engenharia'}, {'Nome': 'Medicina', 'Codigo': 'MED'}, {'Nome': ''}]

        resumo = cursos_services.importar_cursos(db, linhas)

        self.assertEqual(resumo.inseridos, 1)
        self.assertEqual(resumo.descartados, 1)
        self.assertEqual(len(resumo.avisos), 1)
        self.assertEqual(db.tabelas['courses'][-1], {'id': db.tabelas['courses'][-1]['id'],
                                                     'name': 'Medicina', 'code': 'MED'})

    def test_importar_cursos_sem_nome(self):
        with self.assertRaises(NenhumRegistroValido):
            cursos_services.importar_cursos(SupabaseFalso(), [{'Codigo': 'X'}])

    def test_salvar_curso_aplica_padroes(self):
        db = SupabaseFalso()
        cursos_services.salvar_curso(db, {'name': ' Direito ', 'code': '', 'total_semesters': None,
                                          'start_date': date(2024, 2, 1)})
        curso = db.tabelas['courses'][0]
        self.assertEqual(curso['name'], 'Direito')
        self.assertIsNone(curso['code'])
        self.assertEqual(curso['total_semesters'], 8)
        self.assertEqual(curso['start_date'], '2024-02-01')

    def test_carregar_detalhes(self):
        db = SupabaseFalso(
            courses=[{'id': 'c1', 'name': 'Engenharia', 'total_semesters': 4, 'start_date': None}],
            subjects=[
                {'id': 's1', 'name': 'Cálculo', 'semester': 1, 'year': 2024, 'course_id': 'c1', 'professor_id': PROFESSOR},
                {'id': 's2', 'name': 'Física', 'semester': 2, 'year': 2024, 'course_id': None, 'professor_id': PROFESSOR},
            ],
            students=[{'id': 'a1', 'name': 'Ana', 'course_id': 'c1'}],
            professors=[],
        )

        contexto = cursos_services.carregar_detalhes(db, 'c1', PROFESSOR)

        self.assertEqual([d['id'] for d in contexto['disponiveis']], ['s2'])
        self.assertEqual(len(contexto['semestres']), 4)
        self.assertEqual(contexto['semestre_atual'], 1)
        self.assertEqual(len(contexto['alunos']), 1)
        self.assertIsNone(cursos_services.carregar_detalhes(db, 'inexistente', PROFESSOR))
        self.assertEqual(db.contar('professors', 'select'), 0)

    def test_vincular_somente_disciplina_do_professor(self):
        db = SupabaseFalso(subjects=[
            {'id': 's1', 'course_id': None, 'professor_id': PROFESSOR},
            {'id': 's2', 'course_id': None, 'professor_id': 'outro'},
        ])
        cursos_services.vincular_disciplina(db, 's1', 'c1', PROFESSOR)
        cursos_services.vincular_disciplina(db, 's2', 'c1', PROFESSOR)
        self.assertEqual([d['course_id'] for d in db.tabelas['subjects']], ['c1', None])


class TestDisciplinasServices(unittest.TestCase):

    def test_criar_disciplina_grava_professor(self):
        db = SupabaseFalso()
        disciplinas_services.criar_disciplina(
            db, {'name': 'Cálculo', 'code': 'CALC1', 'year': '2024', 'semester': '1', 'course_id': ''}, PROFESSOR
        )
        disciplina = db.tabelas['subjects'][0]
        self.assertEqual(disciplina['professor_id'], PROFESSOR)
        self.assertEqual(disciplina['year'], 2024)
        self.assertIsNone(disciplina['course_id'])

    def test_listar_professores_ordenados(self):
        db = SupabaseFalso(professors=[
            {'id': 'p2', 'name': 'Zélia', 'email': 'z@escola.edu'},
            {'id': 'p1', 'name': 'Bruno', 'email': 'b@escola.edu'},
        ])
        professores = disciplinas_services.listar_professores(db)
        self.assertEqual([p['id'] for p in professores], ['p1', 'p2'])

    def test_alunos_da_disciplina_sem_curso(self):
        self.assertEqual(disciplinas_services.alunos_da_disciplina(SupabaseFalso(), {'course_id': None}), [])


class TestAlunosServices(unittest.TestCase):

    def test_salvar_aluno_limpa_opcionais(self):
        db = SupabaseFalso()
        alunos_services.salvar_aluno(db, {
            'name': ' Ana ', 'student_id': '100', 'course_id': 'c1',
            'email': '  ', 'sexo': 'F', 'renda_media': None, 'raca': '',
        })
        aluno = db.tabelas['students'][0]
        self.assertEqual(aluno['name'], 'Ana')
        self.assertIsNone(aluno['email'])
        self.assertIsNone(aluno['raca'])
        self.assertEqual(aluno['sexo'], 'F')

    def test_nota_pertence_ao_aluno(self):
        db = SupabaseFalso(grades=[{'id': 'g1', 'student_id': 'a1', 'grade': 5.0}])
        self.assertIsNone(alunos_services.obter_nota(db, 'g1', 'a2'))
        alunos_services.excluir_nota(db, 'g1', 'a2')
        self.assertEqual(len(db.tabelas['grades']), 1)
        alunos_services.excluir_nota(db, 'g1', 'a1')
        self.assertEqual(db.tabelas['grades'], [])

    def test_salvar_nota(self):
        db = SupabaseFalso()
        alunos_services.salvar_nota(db, {
            'subject_id': 's1', 'assessment_type': 'Prova', 'assessment_name': 'P1',
            'grade': 7.5, 'max_grade': None, 'date_assigned': date(2024, 5, 20),
        }, 'a1')
        nota = db.tabelas['grades'][0]
        self.assertEqual(nota['student_id'], 'a1')
        self.assertEqual(nota['max_grade'], 10.0)
        self.assertEqual(nota['date_assigned'], '2024-05-20')


class TestDashboard(unittest.TestCase):

    DISCIPLINAS = [
        {'id': 's1', 'name': 'Cálculo', 'code': 'CALC1', 'course_id': 'c1'},
        {'id': 's2', 'name': 'Física', 'code': 'FIS', 'course_id': 'c2'},
    ]
    NOTAS = [
        {'student_id': 'a1', 'subject_id': 's1', 'grade': 10, 'assessment_type': 'Prova'},
        {'student_id': 'a2', 'subject_id': 's1', 'grade': 8, 'assessment_type': ''},
        {'student_id': 'a1', 'subject_id': 's2', 'grade': 6, 'assessment_type': 'Prova'},
        {'student_id': 'a1', 'subject_id': 's2', 'grade': 0, 'assessment_type': None},
    ]

    def test_estatisticas(self):
        estatisticas = dashboard_services.calcular_estatisticas(self.NOTAS, self.DISCIPLINAS)

        self.assertEqual(estatisticas['media_geral'], 6.0)
        self.assertEqual(estatisticas['total_notas'], 4)
        distribuicao = {d['faixa']: d['quantidade'] for d in estatisticas['distribuicao']}
        self.assertEqual(distribuicao, {'0-2': 1, '2-4': 0, '4-6': 0, '6-8': 1, '8-10': 2})
        self.assertEqual(estatisticas['por_disciplina'], [
            {'id': 's1', 'nome': 'Cálculo', 'codigo': 'CALC1', 'media': 9.0, 'alunos': 2},
            {'id': 's2', 'nome': 'Física', 'codigo': 'FIS', 'media': 3.0, 'alunos': 1},
        ])
        self.assertEqual(estatisticas['por_tipo'], [
            {'tipo': 'Prova', 'media': 8.0},
            {'tipo': 'Sem tipo', 'media': 4.0},
        ])

    def test_media_com_duas_casas(self):
        notas = [{'subject_id': 's1', 'grade': g} for g in (7, 8, 8)]
        self.assertEqual(dashboard_services.calcular_estatisticas(notas, [])['media_geral'], 7.67)

    def test_sem_notas(self):
        estatisticas = dashboard_services.calcular_estatisticas([], self.DISCIPLINAS)
        self.assertEqual(estatisticas['media_geral'], 0.0)
        self.assertEqual(estatisticas['por_disciplina'], [])
        self.assertTrue(all(d['quantidade'] == 0 for d in estatisticas['distribuicao']))

    def test_carregar_dashboard_com_filtro(self):
        db = SupabaseFalso(
            subjects=[dict(d, professor_id=PROFESSOR) for d in self.DISCIPLINAS],
            grades=self.NOTAS,
            students=[
                {'id': 'a1', 'course_id': 'c1'},
                {'id': 'a2', 'course_id': 'c1'},
                {'id': 'a3', 'course_id': 'c2'},
            ],
        )

        geral = dashboard_services.carregar_dashboard(db, PROFESSOR)
        self.assertEqual(geral['total_alunos'], 3)
        self.assertEqual(geral['total_disciplinas'], 2)

        filtrado = dashboard_services.carregar_dashboard(db, PROFESSOR, 's1')
        self.assertEqual(filtrado['total_alunos'], 2)
        self.assertEqual(filtrado['total_disciplinas'], 1)
        self.assertEqual(filtrado['media_geral'], 9.0)
        self.assertEqual(len(filtrado['disciplinas']), 2)


class TestAuthServices(unittest.TestCase):

    def test_validar_senha(self):
        self.assertEqual(auth_services.validar_senha('Senha123'), [])
        self.assertEqual(len(auth_services.validar_senha('abc')), 3)
        self.assertEqual(len(auth_services.validar_senha('')), 4)
        self.assertEqual(auth_services.validar_senha('senhasenha1'),
                         ["A senha deve conter pelo menos uma letra maiúscula"])

    def test_autenticar_monta_perfil_e_encerra_sessao(self):
        db = MagicMock()
        db.auth.sign_in_with_password.return_value = SimpleNamespace(user=SimpleNamespace(
            id='u1', email='prof@escola.edu', user_metadata={'name': 'Prof. Maria'}
        ))

        perfil = auth_services.autenticar(db, 'prof@escola.edu', 'Senha123')

        self.assertEqual(perfil, {'id': 'u1', 'email': 'prof@escola.edu', 'nome': 'Prof. Maria'})
        db.auth.sign_out.assert_called_once()

    def test_autenticar_credenciais_invalidas(self):
        db = MagicMock()
        db.auth.sign_in_with_password.side_effect = AuthError("Invalid login credentials", None)
        with self.assertRaises(auth_services.ErroAutenticacao):
            auth_services.autenticar(db, 'prof@escola.edu', 'errada')

    def test_redefinir_senha_com_link_expirado(self):
        db = MagicMock()
        db.auth.verify_otp.side_effect = AuthError("Token has expired", None)

        with self.assertRaises(auth_services.ErroAutenticacao):
            auth_services.redefinir_senha(db, 'token', 'NovaSenha1')

        db.auth.update_user.assert_not_called()
        db.auth.sign_out.assert_called_once()

    def test_redefinir_senha(self):
        db = MagicMock()
        auth_services.redefinir_senha(db, 'token', 'NovaSenha1')
        db.auth.verify_otp.assert_called_once_with({'token_hash': 'token', 'type': 'recovery'})
        db.auth.update_user.assert_called_once_with({'password': 'NovaSenha1'})


if __name__ == '__main__':
    unittest.main()
