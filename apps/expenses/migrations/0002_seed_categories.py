# Seeds the default expense categories

from django.db import migrations


DEFAULT_CATEGORIES = [
    ('Food & Dining', '🍽️'),
    ('Transportation', '🚗'),
    ('Accommodation', '🏨'),
    ('Entertainment', '🎬'),
    ('Shopping', '🛍️'),
    ('Groceries', '🛒'),
    ('Utilities', '💡'),
    ('Health & Medical', '🏥'),
    ('Education', '📚'),
    ('Other', '📦'),
]


def seed_categories(apps, schema_editor):
    ExpenseCategory = apps.get_model('expenses', 'ExpenseCategory')
    for name, icon in DEFAULT_CATEGORIES:
        ExpenseCategory.objects.get_or_create(name=name, defaults={'icon': icon})


def remove_categories(apps, schema_editor):
    ExpenseCategory = apps.get_model('expenses', 'ExpenseCategory')
    ExpenseCategory.objects.filter(name__in=[name for name, _ in DEFAULT_CATEGORIES]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('expenses', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed_categories, remove_categories),
    ]
