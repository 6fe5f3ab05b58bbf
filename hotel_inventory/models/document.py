from tortoise import fields, models


class Document(models.Model):
    """
    One node of the hierarchical document store. ``path`` is the full slash-separated
    key (e.g. ``inventory/abc/batches/BAT_1``); ``data`` holds the node's own scalar
    fields only. Child nodes live in their own rows, so a subtree read is a prefix scan.
    """
    path = fields.CharField(max_length=512, primary_key=True)
    parent = fields.CharField(max_length=512, db_index=True)
    key = fields.CharField(max_length=255)
    data = fields.JSONField(default=dict)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "documents"
        indexes = [
            ("parent", "key"),  # Child listing
        ]
