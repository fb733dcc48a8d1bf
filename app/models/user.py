import re

from mongoengine import (
    BooleanField,
    DateTimeField,
    ListField,
    ObjectIdField,
    StringField,
    ValidationError,
    queryset_manager,
)

from app.models.base import BaseDocument
from app.utils.base import UserRole
from app.utils.security import BCRYPT_MAX_BYTES, TokenConfig, averify_password, create_token, hash_password


# Word-character runs joined by single "." or "-", then "@", then the same
# for the domain ending in a 2-3 character suffix. Written so a failed match
# cannot backtrack exponentially.
EMAIL_PATTERN = re.compile(r"\w+(?:[.-]\w+)*@\w+(?:[.-]\w+)*\.\w{2,3}", re.ASCII)
EMAIL_MAX_LENGTH = 254
PHONE_PATTERN = re.compile(r"[0-9]{10}")

HASHED_FIELDS = ("password", "security_question_answer")
SECRET_FIELDS = ("password", "security_question_answer", "reset_password_token", "verification_token")


class PasswordNotLoadedError(RuntimeError):
    """The record was read without its password field."""


def validate_not_blank(value):
    if not value.strip():
        raise ValidationError("Value cannot be blank")


def validate_email(value):
    if len(value) > EMAIL_MAX_LENGTH or not EMAIL_PATTERN.fullmatch(value):
        raise ValidationError("Please enter a valid email address")


def validate_phone_number(value):
    if not PHONE_PATTERN.fullmatch(value):
        raise ValidationError("Phone number should be exactly 10 digits")


def validate_role(value):
    if value not in UserRole.values():
        raise ValidationError(f"{value} is not a valid user role")


def normalize_security_answer(answer: str) -> str:
    return answer.strip().lower()


class User(BaseDocument):
    """Account holder.

    Fields:
    - first_name (str, required) / last_name (str|None)
    - email (str, unique): lower-cased login identifier
    - password (str): bcrypt hash, excluded from ``User.objects`` reads
    - phone_number (str|None): exactly 10 digits
    - role (str): admin / content creator / user
    - is_verified (bool)
    - reset_password_token/reset_password_expire: password reset workflow
    - security_question_answer (str|None): bcrypt hash of the normalized answer
    - favourites (list[ObjectId]): Property ids, no duplicates, not owned
    - profile_picture (str|None)
    - verification_token/verification_token_expires: email verification workflow
    - coupon_used (bool)

    Python attribute names are snake_case, stored keys are camelCase.
    ``save()`` runs ``prepare_for_persist`` first, so a modified password is
    hashed before any write.
    """
    first_name = StringField(db_field="firstName", required=True, null=False, validation=validate_not_blank)
    last_name = StringField(db_field="lastName", required=False, null=True)
    email = StringField(required=True, null=False, unique=True, validation=validate_email)
    password = StringField(required=False, null=True)
    phone_number = StringField(db_field="phoneNumber", required=False, null=True, validation=validate_phone_number)
    role = StringField(required=True, null=False, default=UserRole.USER.value, validation=validate_role)
    is_verified = BooleanField(db_field="isVerified", required=True, null=False, default=False)

    reset_password_token = StringField(db_field="resetPasswordToken", required=False, null=True)
    reset_password_expire = DateTimeField(db_field="resetPasswordExpire", required=False, null=True)
    security_question_answer = StringField(db_field="securityQuestionAnswer", required=False, null=True)

    favourites = ListField(ObjectIdField(), null=False, default=list)
    profile_picture = StringField(db_field="profilePicture", required=False, null=True)
    verification_token = StringField(db_field="verificationToken", required=False, null=True)
    verification_token_expires = DateTimeField(db_field="verificationTokenExpires", required=False, null=True)
    coupon_used = BooleanField(db_field="couponUsed", required=True, null=False, default=False)

    meta = {
        "collection": "users",
        "indexes": [
            {"fields": ["phone_number"]},
            {"fields": ["role"]},
            {"fields": ["is_verified"]},
            {"fields": ["reset_password_token"]},
            {"fields": ["favourites"]},
            {"fields": ["role", "is_verified"]},
        ],
    }

    @queryset_manager
    def objects(doc_cls, queryset):
        return queryset.exclude("password")

    @queryset_manager
    def with_password(doc_cls, queryset):
        return queryset

    def is_modified(self, field_name: str) -> bool:
        """True for a record never saved, or when ``field_name`` changed since load."""
        if self._created or self.pk is None:
            return True
        return self._fields[field_name].db_field in self._get_changed_fields()

    def clean(self):
        for name in ("first_name", "last_name", "email", "phone_number"):
            value = getattr(self, name)
            if isinstance(value, str):
                setattr(self, name, value.strip())
        if isinstance(self.email, str):
            self.email = self.email.lower()
        # Case only: " admin" is not a role
        if isinstance(self.role, str):
            self.role = self.role.lower()

        if self.favourites:
            unique = list(dict.fromkeys(self.favourites))
            if len(unique) != len(self.favourites):
                self.favourites = unique

    def validate(self, clean=True):
        super().validate(clean)
        if not self.password and self.is_modified("password"):
            raise ValidationError("Password is required", errors={"password": "Field is required"})
        if self.password and self.is_modified("password") and len(self.password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            message = f"Password cannot be longer than {BCRYPT_MAX_BYTES} bytes"
            raise ValidationError(message, errors={"password": message})

    def save(self, *args, **kwargs):
        plaintext = {name: getattr(self, name) for name in HASHED_FIELDS}
        prepare_for_persist(self)
        try:
            return super().save(*args, **kwargs)
        except Exception:
            # Put the caller's values back so a retry hashes them once, not the hash
            for name, value in plaintext.items():
                setattr(self, name, value)
            raise

    async def compare_password(self, candidate: str) -> bool:
        if self.password is None:
            raise PasswordNotLoadedError("Fetch the user through User.with_password to compare passwords")
        return await averify_password(candidate, self.password)

    async def compare_security_answer(self, answer: str) -> bool:
        if not self.security_question_answer or not answer:
            return False
        return await averify_password(normalize_security_answer(answer), self.security_question_answer)

    def get_jwt_token(self, config: TokenConfig | None = None) -> str:
        if self.pk is None:
            raise ValueError("Cannot issue a token for an unsaved user")
        return create_token(str(self.pk), config)

    def to_output(self, fields=None, exclude=None):
        return super().to_output(fields=fields, exclude=list(exclude or []) + list(SECRET_FIELDS))


def prepare_for_persist(user: User) -> User:
    """Validate the record and hash secrets that changed since it was loaded.

    ``User.save`` calls this before every write. Raises ``ValidationError`` or
    ``HashingError``; on either the record is left unhashed and nothing is
    written.
    """
    user.validate()

    hash_pw = user.is_modified("password")
    hash_answer = bool(user.security_question_answer) and user.is_modified("security_question_answer")

    # Compute both before assigning so a failure leaves no half-hashed record.
    password = hash_password(user.password) if hash_pw else None
    answer = hash_password(normalize_security_answer(user.security_question_answer)) if hash_answer else None

    if password is not None:
        user.password = password
    if answer is not None:
        user.security_question_answer = answer
    return user
