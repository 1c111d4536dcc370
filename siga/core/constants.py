"""
Constantes Globais do Sistema.
Fonte Única da Verdade (Single Source of Truth) para tabelas, sinônimos de
colunas das planilhas e valores padrão da importação.
"""

# === TABELAS DO SUPABASE ===
TABELA_CURSOS = 'courses'
TABELA_DISCIPLINAS = 'subjects'
TABELA_ALUNOS = 'students'
TABELA_NOTAS = 'grades'
TABELA_PROFESSORES = 'professors'

# === TIPOS DE PLANILHA ===
TIPO_ALUNOS = 'students'
TIPO_NOTAS = 'grades'
TIPO_NAO_RECONHECIDO = 'unrecognized'

ROTULOS_TIPO = {
    TIPO_ALUNOS: 'ALUNOS',
    TIPO_NOTAS: 'NOTAS',
}

# === ARQUIVOS ACEITOS ===
EXTENSOES_PLANILHA = ('.csv', '.xls', '.xlsx')
# Tipos MIME aceitos por extensão (navegadores variam, principalmente para CSV)
MIME_GENERICO = 'application/octet-stream'
MIME_PLANILHA = {
    '.xlsx': {'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet', MIME_GENERICO},
    '.xls': {'application/vnd.ms-excel', MIME_GENERICO},
    '.csv': {'text/csv', 'application/csv', 'text/plain', 'application/vnd.ms-excel', MIME_GENERICO},
}
SEPARADORES_CSV = (',', ';', '\t')

# === DETECÇÃO DO TIPO (cabeçalhos já em minúsculas) ===
SINONIMOS_DETECCAO = {
    'nome': {'name', 'nome', 'student_name', 'nome_aluno'},
    'matricula': {'student_id', 'matricula', 'matrícula', 'id_aluno', 'codigo_aluno'},
    'nota': {'grade', 'nota', 'score', 'pontuacao', 'pontuação'},
    'disciplina': {
        'subject', 'disciplina', 'subject_name', 'subject_code',
        'nome_disciplina', 'codigo_disciplina', 'materia', 'matéria',
    },
    'tipo_avaliacao': {'assessment_type', 'tipo', 'tipo_avaliacao', 'tipo_avaliação'},
}

# === MAPEAMENTO DE CAMPOS (ordem = prioridade) ===
CAMPOS_ALUNO = {
    'name': ['nome', 'name', 'student_name', 'nome_aluno'],
    'student_id': ['matricula', 'student_id', 'matrícula', 'id_aluno', 'codigo_aluno'],
    'email': ['e-mail', 'email', 'student_email'],
    'course': ['curso', 'course', 'course_name', 'nome_curso', 'codigo_curso', 'course_code'],
    'sexo': ['sexo', 'sex', 'gender', 'genero', 'gênero'],
    'renda_media': ['renda_media', 'renda média', 'renda media', 'renda', 'income', 'average_income'],
    'raca': ['raca', 'raça', 'race', 'cor_raca', 'cor/raça'],
}

CAMPOS_NOTA = {
    'student_id': ['matricula', 'student_id', 'matrícula', 'id_aluno', 'codigo_aluno'],
    'subject': [
        'disciplina', 'subject', 'subject_name', 'subject_code',
        'nome_disciplina', 'codigo_disciplina', 'materia', 'matéria',
    ],
    'grade': ['nota', 'grade', 'score', 'pontuacao', 'pontuação'],
    'max_grade': ['nota_maxima', 'nota_máxima', 'max_grade', 'pontuacao_maxima'],
    'assessment_type': ['tipo', 'assessment_type', 'tipo_avaliacao', 'tipo_avaliação'],
    'assessment_name': ['avaliacao', 'avaliação', 'assessment_name', 'nome_avaliacao'],
    'date_assigned': ['data', 'date', 'date_assigned', 'data_avaliacao'],
}

CAMPOS_CURSO = {
    'name': ['nome', 'name', 'curso', 'course'],
    'code': ['codigo', 'código', 'code'],
}

# Colunas obrigatórias (para mensagens de erro)
OBRIGATORIOS = {
    TIPO_ALUNOS: ('Nome', 'Matricula'),
    TIPO_NOTAS: ('Matricula', 'Disciplina', 'Nota'),
}

# === PADRÕES ===
TIPO_AVALIACAO_PADRAO = 'Prova'
NOME_AVALIACAO_PADRAO = 'Avaliação'
NOTA_MAXIMA_PADRAO = 10.0
SEMESTRES_PADRAO = 8
MESES_POR_SEMESTRE = 6

# Sessões de importação abandonadas expiram após este intervalo (segundos)
VALIDADE_SESSAO_IMPORTACAO = 2 * 60 * 60

# Faixas do gráfico de distribuição (min inclusivo, max exclusivo)
FAIXAS_NOTAS = [
    ('0-2', 0, 2),
    ('2-4', 2, 4),
    ('4-6', 4, 6),
    ('6-8', 6, 8),
    ('8-10', 8, 10),
]

# Itens do menu (injetados em todos os templates)
MENU_PRINCIPAL = [
    ('main_bp.index', 'Início'),
    ('cursos_bp.lista', 'Cursos'),
    ('disciplinas_bp.lista', 'Disciplinas'),
    ('alunos_bp.lista', 'Alunos'),
    ('importacao_bp.upload_form', 'Importar Dados'),
    ('dashboard_bp.painel', 'Dashboard'),
]
