#!/usr/bin/env python
"""
Script to create a development superuser and a sample article.

The sample article gives the format toggle something to convert:
    http://localhost:8000/articles/<id>/
"""

import os
import sys

import django

# Setup Django environment
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')
django.setup()

from django.contrib.auth import get_user_model

from apps.articles.models import Article

User = get_user_model()

SAMPLE_TITLE = 'Shop Opens'
SAMPLE_BODY = (
    "A new shop opened today in the city. The owner said she had waited "
    "three years for the right location.\n\n"
    "The shop sells books and coffee and will stay open until 9 p.m."
)


def create_superuser():
    """Create superuser if it doesn't exist."""

    username = 'admin'
    email = 'admin@localhost'
    password = 'admin'  # Simple password for development only!

    if User.objects.filter(username=username).exists():
        print(f"[INFO] Superuser '{username}' already exists.")
    else:
        User.objects.create_superuser(
            username=username,
            email=email,
            password=password
        )
        print("[SUCCESS] Superuser created!")
        print(f"          Username: {username}")
        print(f"          Password: {password}")


def create_sample_article():
    """Create the sample article if it doesn't exist."""
    article, created = Article.objects.get_or_create(
        title=SAMPLE_TITLE,
        defaults={'body': SAMPLE_BODY},
    )
    status = "created" if created else "already exists"
    print(f"[INFO] Sample article {status}: http://localhost:8000/articles/{article.pk}/")


if __name__ == '__main__':
    create_superuser()
    create_sample_article()
    print("\nAdmin: http://localhost:8000/admin/")
    print("[WARNING] This is a development password. Change it in production!")
