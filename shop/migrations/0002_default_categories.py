from django.db import migrations

DEFAULT_CATEGORIES = [
    ('Borka', 'برقع', 'borka'),
    ('Abaya', 'عباية', 'abaya'),
    ('Hijab', 'حجاب', 'hijab'),
    ('Accessories', 'إكسسوارات', 'accessories'),
]


def create_categories(apps, schema_editor):
    Category = apps.get_model('shop', 'Category')
    for name, name_ar, slug in DEFAULT_CATEGORIES:
        Category.objects.get_or_create(slug=slug, defaults={'name': name, 'name_ar': name_ar})


def remove_categories(apps, schema_editor):
    Category = apps.get_model('shop', 'Category')
    Category.objects.filter(slug__in=[slug for _, _, slug in DEFAULT_CATEGORIES]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('shop', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(create_categories, remove_categories),
    ]
