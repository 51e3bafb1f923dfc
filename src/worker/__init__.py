"""Background workers for procurement fulfillment service"""
from .fulfillment_reconciler import FulfillmentReconcilerWorker

__all__ = ["FulfillmentReconcilerWorker"]
