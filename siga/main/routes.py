from flask import render_template

from . import main_bp
from siga.auth.services import exigir_login


@main_bp.before_request
def restringir_acesso():
    return exigir_login()


@main_bp.route('/')
def index():
    return render_template('index.html')
