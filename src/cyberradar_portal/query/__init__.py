from cyberradar_portal.query.builder import alert_by_id_sql, build_alert_sql
from cyberradar_portal.query.facade import AlertQueryFacade, AlertStore, sort_alerts
from cyberradar_portal.query.params import AlertQuery, split_list
from cyberradar_portal.query.parser import AlertDocumentParser
from cyberradar_portal.query.workflow import AlertWorkflow, WorkflowStore

__all__ = [
    "AlertQuery",
    "AlertQueryFacade",
    "AlertStore",
    "AlertDocumentParser",
    "AlertWorkflow",
    "WorkflowStore",
    "alert_by_id_sql",
    "build_alert_sql",
    "sort_alerts",
    "split_list",
]
