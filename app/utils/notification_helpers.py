from app.constants.notification_templates import EMAIL_TEMPLATES, NotificationKind


def render_email(kind: NotificationKind, **context) -> tuple[str, str]:
    template = EMAIL_TEMPLATES.get(kind)
    if not template:
        raise ValueError(f"No email template for {kind}")

    subject_tpl, body_tpl = template
    try:
        return subject_tpl.format(**context), body_tpl.format(**context)
    except KeyError as e:
        raise ValueError(
            f"Missing email context key: {e.args[0]} for {kind}"
        )


def humanize_status(value) -> str:
    raw = getattr(value, "value", value)
    return str(raw).replace("_", " ")
