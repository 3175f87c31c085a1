"""Payment gateway adapters. Importing ``adapters`` registers every module listed there."""
