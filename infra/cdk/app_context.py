import aws_cdk as cdk


def context_list(app: cdk.App, key: str) -> list[str]:
    # `-c key=a,b` arrives as a string, cdk.json may hold a JSON list
    value = app.node.try_get_context(key) or []
    if isinstance(value, str):
        return [p.strip() for p in value.split(",") if p.strip()]
    return list(value)


def context_flag(app: cdk.App, key: str) -> bool:
    # `-c key=false` arrives as the string "false"
    value = app.node.try_get_context(key)
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)
