from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, SubmitField
from wtforms.validators import DataRequired, Length

class LoginForm(FlaskForm):
    """Login da equipe da regulação (quem gera as listas)."""
    matricula_or_email = StringField("Matrícula ou e-mail", validators=[DataRequired(), Length(max=180)])
    password = PasswordField("Senha", validators=[DataRequired(), Length(max=128)])
    submit = SubmitField("Acessar")
