"""
stepsERP Modules.

Thin orchestration layers over the kernel.  Each module contains:
- Domain models (the nouns)
- Workflows (state machines)
- ORM persistence models
- A service facade owning the transaction boundary

Modules:
- Requests: material requests, cash advances, advance retirements, drafts
- Procurement: purchase orders raised by material-request approval
- DocSign: signature request composer and signing lifecycle
- Leave: manager then HR leave approval
"""
