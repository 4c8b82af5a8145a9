from django.db import migrations

DEFAULTS = {
    "voting_enabled": ("true", "Whether voting is currently enabled"),
    "voting_end_date": ("2025-07-10T23:59:59Z", "Voting end date and time"),
    "site_title": (
        "Dreamers Academy Camp - 10th Year Celebration Gala",
        "Site title",
    ),
    "max_votes_per_session": ("1", "Maximum votes per session per category"),
}


def seed_settings(apps, schema_editor):
    SystemSetting = apps.get_model("voting", "SystemSetting")
    for key, (value, description) in DEFAULTS.items():
        SystemSetting.objects.get_or_create(
            key=key,
            defaults={"value": value, "description": description},
        )


def unseed_settings(apps, schema_editor):
    SystemSetting = apps.get_model("voting", "SystemSetting")
    SystemSetting.objects.filter(key__in=DEFAULTS).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("voting", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed_settings, unseed_settings),
    ]
