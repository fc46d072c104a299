from flask_wtf import FlaskForm
from wtforms import (
    DateField,
    IntegerField,
    SelectField,
    StringField,
    SubmitField,
    PasswordField,
)
from wtforms.validators import (
    DataRequired,
    Email,
    Length,
    Regexp,
    EqualTo,
    NumberRange,
    Optional,
    ValidationError,
)

from models.feature import FEATURE_STATUS_CHOICES, FeatureStatus


class SignupForm(FlaskForm):
    username = StringField(
        "Username",
        validators=[
            DataRequired(message="Username is required."),
            Length(max=80, message="Username must be 80 characters or fewer."),
            Regexp(
                r"^[A-Za-z0-9_.-]+$",
                message="Username may only include letters, numbers, dots, hyphens, and underscores.",
            ),
        ],
    )
    name = StringField("Name", [DataRequired(), Length(max=80)])
    email = StringField("Email", [DataRequired(), Email(), Length(max=120)])
    password = PasswordField(
        "Password",
        validators=[
            DataRequired(message="Password is required."),
            Length(min=8, message="Password must be at least 8 characters."),
        ],
    )
    confirm_password = PasswordField(
        "Confirm Password",
        validators=[
            DataRequired(message="Please confirm the password."),
            EqualTo("password", message="Passwords must match."),
        ],
    )
    submit = SubmitField("Register")

    def validate_username(self, field):
        from models.user import User

        if User.query.filter_by(username=field.data).first():
            raise ValidationError("This username is already in use.")

    def validate_email(self, field):
        from models.user import User

        if User.query.filter_by(email=field.data).first():
            raise ValidationError("This email is already in use.")


class LoginForm(FlaskForm):
    username = StringField("Username", [DataRequired()])
    password = PasswordField("Password", [DataRequired()])
    submit = SubmitField("Login")


class ProjectForm(FlaskForm):
    name = StringField(
        "Name",
        validators=[
            DataRequired(message="A project name is required."),
            Length(max=200, message="Name must be 200 characters or fewer."),
        ],
    )
    deadline = DateField(
        "Deadline",
        format="%Y-%m-%d",
        validators=[DataRequired(message="A deadline is required.")],
    )
    feature_limit = IntegerField(
        "Feature Limit",
        default=1,
        validators=[
            Optional(),
            NumberRange(min=1, message="Feature limit must be at least 1."),
        ],
    )
    submit = SubmitField("Create Project")


class FeatureForm(FlaskForm):
    title = StringField(
        "Title",
        validators=[DataRequired(message="A feature title is required.")],
    )
    status = SelectField(
        "Status",
        choices=FEATURE_STATUS_CHOICES,
        default=FeatureStatus.PLANNED.value,
    )
    submit = SubmitField("Add Feature")


class FeatureStatusForm(FlaskForm):
    status = SelectField("Status", choices=FEATURE_STATUS_CHOICES)
    submit = SubmitField("Update")
