from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileRequired
from wtforms import IntegerField, SelectField, TextAreaField
from wtforms.validators import DataRequired, Optional, Length
from ...models.document import DOCUMENT_TYPES

DOCUMENT_TYPE_LABELS = {
    "PEDIDO_MEDICO": "Pedido Médico",
    "LAUDO_EXAME": "Laudo de Exame",
    "DOCUMENTO_CIDADAO": "Documento / CPF",
    "OUTROS": "Outros",
}

class ListUploadForm(FlaskForm):
    """Envio de foto/documento pelo link (sem sessão, então sem CSRF)."""

    class Meta:
        csrf = False

    file = FileField("Arquivo", validators=[FileRequired()])
    itemId = IntegerField("Registro", validators=[DataRequired()])
    documentType = SelectField(
        "Tipo de documento",
        choices=[(t, DOCUMENT_TYPE_LABELS[t]) for t in DOCUMENT_TYPES],
        default="PEDIDO_MEDICO",
    )
    notes = TextAreaField("Observação", validators=[Optional(), Length(max=2000)])
