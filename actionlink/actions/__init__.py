"""
ActionLink actions module

Components:
- short_id: URL-safe short id generation
- store: ActionStore contract and Supabase implementation
- creation: validate + persist new actions with collision retry
- resolver: short id -> typed action
- amounts: exact decimal <-> smallest-unit conversion
- transactions: typed action + caller -> unsigned transaction
- metadata: display metadata with best-effort NFT enrichment
- lifecycle: execution state machine
- wallet: web3 signing provider adapter
- links: short URL and explorer URL helpers
"""
