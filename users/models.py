from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models, transaction
import logging

logger = logging.getLogger('abbey')


class UserManager(BaseUserManager):
    """
    Manager for a user model keyed by email instead of username.
    """
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("An email address is required")
        email = self.normalize_email(email).lower()
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            # OAuth users never log in with a password
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get('is_superuser') is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)

    def get_or_create_from_oauth(self, provider, oauth_id, email, name, avatar_url=None):
        """
        Return the user registered for ``(provider, oauth_id)``, creating it
        on first login. Existing users are returned untouched: the profile
        belongs to the user once created.
        """
        user = self.filter(oauth_provider=provider, oauth_id=oauth_id).first()
        if user is not None:
            return user, False

        with transaction.atomic():
            user = self.create_user(
                email=email,
                name=(name or email.split('@')[0]).strip(),
                avatar_url=avatar_url or None,
                oauth_provider=provider,
                oauth_id=oauth_id,
            )
        logger.info(f"User {user.pk} created from {provider} login")
        return user, True


class User(AbstractUser):
    """
    Account created on first OAuth login. Identified by email; the display
    name and avatar are the only fields a user may change afterwards.
    """
    username = None
    first_name = None
    last_name = None

    email = models.EmailField(
        unique=True,
        error_messages={
            'unique': "A user with that email already exists.",
        },
    )
    name = models.CharField(max_length=255)
    avatar_url = models.URLField(max_length=1024, blank=True, null=True)
    oauth_provider = models.CharField(max_length=50, blank=True, default='')
    # null for accounts created outside OAuth (createsuperuser)
    oauth_id = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    class Meta:
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['oauth_provider', 'oauth_id'],
                name='unique_oauth_identity',
            ),
        ]

    def __str__(self):
        return self.email

    def get_full_name(self):
        return self.name

    def get_short_name(self):
        return self.name

    def save(self, *args, **kwargs):
        """Override save to normalize email"""
        if self.email:
            self.email = self.email.lower()

        super().save(*args, **kwargs)

    def update_profile(self, name, avatar_url=None):
        """Update display name and avatar, the only user editable fields"""
        self.name = name.strip()
        self.avatar_url = avatar_url or None
        self.save(update_fields=['name', 'avatar_url'])
        logger.info(f"Profile updated for user {self.pk}")
